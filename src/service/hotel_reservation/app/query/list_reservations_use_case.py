from datetime import date
from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.app.interface.i_reservation_repo import IReservationRepo
from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation


class ListReservationsUseCase:
    def __init__(self, *, reservation_repo: IReservationRepo) -> None:
        self.reservation_repo = reservation_repo

    @classmethod
    @inject
    def depends(
        cls,
        reservation_repo: IReservationRepo = Depends(Provide[Container.reservation_repo]),
    ) -> Self:
        return cls(reservation_repo=reservation_repo)

    @Logger.io
    async def list_all(self) -> List[Reservation]:
        return await self.reservation_repo.find_all()

    @Logger.io
    async def list_by_hotel_and_date(self, *, hotel_id: str, start_date: date) -> List[Reservation]:
        """Empty list when the hotel has no reservations starting that day"""
        return await self.reservation_repo.find_by_hotel_and_date(hotel_id, start_date)
