from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.app.interface.i_reservation_repo import IReservationRepo
from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation


class CreateReservationUseCase:
    """
    Create reservation use case

    Flow:
    1. Validate the reservation (fail fast, before any store I/O)
    2. Repository generates an unused confirmation number
    3. Both reservation tables are written in one logged batch

    A confirmation number supplied by the caller is ignored, creation always
    allocates a new one. Use UpsertReservationUseCase to write under a known number.
    """

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
    async def create(self, *, reservation: Reservation) -> str:
        new_reservation = reservation.with_confirmation_number(None).validate()
        return await self.reservation_repo.upsert(new_reservation)
