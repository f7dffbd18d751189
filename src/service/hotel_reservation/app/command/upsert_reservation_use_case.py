from typing import Self, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.app.interface.i_reservation_repo import IReservationRepo
from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation
from src.service.hotel_reservation.domain.value_object.confirmation_number import (
    validate_confirmation_number,
)


class UpsertReservationUseCase:
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
    async def upsert(self, *, confirmation_number: str, reservation: Reservation) -> Tuple[str, bool]:
        """
        Write the reservation under confirmation_number.

        Returns:
            (confirmation_number, created), created is False when the number already existed
        """
        validate_confirmation_number(confirmation_number)
        reservation = reservation.with_confirmation_number(confirmation_number).validate()

        existed = await self.reservation_repo.exists(confirmation_number)
        stored_as = await self.reservation_repo.upsert(reservation)
        return stored_as, not existed
