from datetime import date
from typing import Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import InvalidArgumentError
from src.service.hotel_reservation.domain.value_object.confirmation_number import (
    validate_confirmation_number,
)


# CQL smallint
ROOM_NUMBER_MIN = 0
ROOM_NUMBER_MAX = 32767


@attrs.define
class Reservation:
    hotel_id: str
    start_date: date
    end_date: date
    room_number: int
    guest_id: UUID
    confirmation_number: Optional[str] = None

    def validate(self) -> 'Reservation':
        """Raise InvalidArgumentError unless every column can be written as-is."""
        if not isinstance(self.hotel_id, str) or not self.hotel_id:
            raise InvalidArgumentError('hotel_id may not be null nor empty')
        for field_name in ('start_date', 'end_date'):
            value = getattr(self, field_name)
            # datetime is a date subclass but carries a time component
            if not isinstance(value, date) or hasattr(value, 'hour'):
                raise InvalidArgumentError(f'{field_name} must be a calendar date')
        if self.start_date > self.end_date:
            raise InvalidArgumentError(
                f'start_date {self.start_date} is after end_date {self.end_date}'
            )
        if (
            isinstance(self.room_number, bool)
            or not isinstance(self.room_number, int)
            or not ROOM_NUMBER_MIN <= self.room_number <= ROOM_NUMBER_MAX
        ):
            raise InvalidArgumentError(
                f'room_number must be an integer between {ROOM_NUMBER_MIN} and {ROOM_NUMBER_MAX}'
            )
        if not isinstance(self.guest_id, UUID):
            raise InvalidArgumentError('guest_id must be a UUID')
        if self.confirmation_number is not None:
            validate_confirmation_number(self.confirmation_number)
        return self

    def with_confirmation_number(self, confirmation_number: Optional[str]) -> 'Reservation':
        return attrs.evolve(self, confirmation_number=confirmation_number)

    def __str__(self) -> str:
        return (
            f'Confirmation Number = {self.confirmation_number}, Hotel ID: {self.hotel_id}, '
            f'Start Date = {self.start_date}, End Date = {self.end_date}, '
            f'Room Number = {self.room_number}, Guest ID = {self.guest_id}'
        )
