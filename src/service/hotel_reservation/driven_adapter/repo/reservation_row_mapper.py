from datetime import date
from typing import Any, Tuple
from uuid import UUID

from cassandra.util import Date

from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation
from src.service.hotel_reservation.driven_adapter.repo.reservation_table_schema import (
    CONFIRMATION_NUMBER,
    END_DATE,
    GUEST_ID,
    HOTEL_ID,
    ROOM_NUMBER,
    START_DATE,
    ReservationSchema,
    TableDefinition,
)


def to_calendar_date(value: Any) -> date:
    """CQL date columns come back as cassandra.util.Date"""
    if isinstance(value, Date):
        return value.date()
    return value


class ReservationRowMapper:
    """
    Reservation <-> table rows.

    Value tuples follow the column order of the table definition, which is also the
    column order of the matching INSERT statement.
    """

    def __init__(self, schema: ReservationSchema) -> None:
        self.schema = schema

    @staticmethod
    def _columns(reservation: Reservation) -> dict[str, Any]:
        return {
            CONFIRMATION_NUMBER: reservation.confirmation_number,
            HOTEL_ID: reservation.hotel_id,
            START_DATE: reservation.start_date,
            END_DATE: reservation.end_date,
            ROOM_NUMBER: reservation.room_number,
            GUEST_ID: reservation.guest_id,
        }

    def _row_for(self, table: TableDefinition, reservation: Reservation) -> Tuple[Any, ...]:
        columns = self._columns(reservation)
        return tuple(columns[name] for name in table.column_names)

    def to_confirmation_row(self, reservation: Reservation) -> Tuple[Any, ...]:
        return self._row_for(self.schema.by_confirmation, reservation)

    def to_hotel_date_row(self, reservation: Reservation) -> Tuple[Any, ...]:
        return self._row_for(self.schema.by_hotel_date, reservation)

    def confirmation_key(self, reservation: Reservation) -> Tuple[Any, ...]:
        return self._key_for(self.schema.by_confirmation, reservation)

    def hotel_date_key(self, reservation: Reservation) -> Tuple[Any, ...]:
        return self._key_for(self.schema.by_hotel_date, reservation)

    def _key_for(self, table: TableDefinition, reservation: Reservation) -> Tuple[Any, ...]:
        columns = self._columns(reservation)
        return tuple(columns[name] for name in table.primary_key_names)

    @staticmethod
    def from_row(row: Any) -> Reservation:
        """Works for rows of both reservation tables (same selected columns)"""
        guest_id = row.guest_id
        return Reservation(
            hotel_id=row.hotel_id,
            start_date=to_calendar_date(row.start_date),
            end_date=to_calendar_date(row.end_date),
            room_number=int(row.room_number),
            guest_id=guest_id if isinstance(guest_id, UUID) else UUID(str(guest_id)),
            confirmation_number=row.confirmation_number,
        )
