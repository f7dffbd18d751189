from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.app.interface.i_reservation_repo import IReservationRepo
from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation


class GetReservationUseCase:
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
    async def get_reservation(self, *, confirmation_number: str) -> Reservation:
        reservation = await self.reservation_repo.find_by_confirmation_number(confirmation_number)

        if not reservation:
            raise NotFoundError(f'Reservation {confirmation_number} not found')

        return reservation
