"""
Reservation Repository Interface

The only writer of reservation tables. Every reservation is stored twice
(by confirmation number, by hotel and start date); implementations keep both
copies in step and never expose per-table writes.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from datetime import date
from typing import List, Optional

from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation


class IReservationRepo(ABC):
    @abstractmethod
    async def exists(self, confirmation_number: str) -> bool:
        pass

    @abstractmethod
    async def find_by_confirmation_number(self, confirmation_number: str) -> Optional[Reservation]:
        """
        Args:
            confirmation_number: Reservation identifier

        Returns:
            Reservation or None if not found (absence is not an error)
        """
        pass

    @abstractmethod
    async def upsert(self, reservation: Reservation) -> str:
        """
        Create or replace a reservation in every table it is stored in.

        A confirmation number is generated when the reservation has none.

        Returns:
            The confirmation number the reservation was stored under
        """
        pass

    @abstractmethod
    async def delete(self, confirmation_number: str) -> bool:
        """
        Returns:
            True if a reservation was deleted, False if none existed
        """
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Every reservation, unpaged"""
        pass

    @abstractmethod
    def iter_all(self) -> AsyncIterator[Reservation]:
        """Same rows as find_all(), yielded as the driver fetches pages"""
        pass

    @abstractmethod
    async def find_by_hotel_and_date(self, hotel_id: str, start_date: date) -> List[Reservation]:
        pass
