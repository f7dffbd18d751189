from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation


class ReservationRequest(BaseModel):
    hotel_id: str
    start_date: date
    end_date: date
    room_number: int
    guest_id: UUID

    model_config = {
        'json_schema_extra': {
            'example': {
                'hotel_id': 'AZ123',
                'start_date': '2020-12-18',
                'end_date': '2020-12-21',
                'room_number': 42,
                'guest_id': '1b4d86f4-ccff-4256-a63d-45c905df2677',
            }
        },
    }

    def to_entity(self) -> Reservation:
        return Reservation(
            hotel_id=self.hotel_id,
            start_date=self.start_date,
            end_date=self.end_date,
            room_number=self.room_number,
            guest_id=self.guest_id,
        )


class ReservationResponse(BaseModel):
    confirmation_number: Optional[str] = None
    hotel_id: str
    start_date: date
    end_date: date
    room_number: int
    guest_id: UUID

    @classmethod
    def from_entity(cls, reservation: Reservation) -> 'ReservationResponse':
        return cls(
            confirmation_number=reservation.confirmation_number,
            hotel_id=reservation.hotel_id,
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            room_number=reservation.room_number,
            guest_id=reservation.guest_id,
        )
