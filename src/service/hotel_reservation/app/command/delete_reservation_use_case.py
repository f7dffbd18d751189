from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.app.interface.i_reservation_repo import IReservationRepo


class DeleteReservationUseCase:
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
    async def delete(self, *, confirmation_number: str) -> None:
        deleted = await self.reservation_repo.delete(confirmation_number)

        if not deleted:
            raise NotFoundError(f'Reservation {confirmation_number} not found')
