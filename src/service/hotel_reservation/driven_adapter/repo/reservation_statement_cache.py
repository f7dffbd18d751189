"""
Reservation Statement Cache

Prepared once per repository lifetime, read-only afterwards. Reads carry the read
consistency level, inserts/deletes the write consistency level (the logged batch
that wraps them sets it again for the whole batch).
"""

from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from cassandra.query import BatchStatement, BatchType, BoundStatement, PreparedStatement

from src.platform.exception.exceptions import StatementBindingError
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


class ReservationStatement(StrEnum):
    EXISTS_BY_CONFIRMATION = 'exists_by_confirmation'
    FIND_BY_CONFIRMATION = 'find_by_confirmation'
    FIND_BY_HOTEL_DATE = 'find_by_hotel_date'
    FIND_ALL = 'find_all'
    INSERT_BY_HOTEL_DATE = 'insert_by_hotel_date'
    INSERT_BY_CONFIRMATION = 'insert_by_confirmation'
    DELETE_BY_CONFIRMATION = 'delete_by_confirmation'
    DELETE_BY_HOTEL_DATE = 'delete_by_hotel_date'


READ_STATEMENTS = frozenset(
    {
        ReservationStatement.EXISTS_BY_CONFIRMATION,
        ReservationStatement.FIND_BY_CONFIRMATION,
        ReservationStatement.FIND_BY_HOTEL_DATE,
        ReservationStatement.FIND_ALL,
    }
)

# Column order shared by the confirmation-table reads and the row mapper
RESERVATION_COLUMNS = (
    CONFIRMATION_NUMBER,
    HOTEL_ID,
    START_DATE,
    END_DATE,
    ROOM_NUMBER,
    GUEST_ID,
)


def _insert_cql(table_name: str, table: TableDefinition) -> str:
    columns = ', '.join(table.column_names)
    markers = ', '.join('?' for _ in table.column_names)
    return f'INSERT INTO {table_name} ({columns}) VALUES ({markers})'


def build_statement_cql(schema: ReservationSchema) -> dict[ReservationStatement, str]:
    by_confirmation = schema.qualified(schema.by_confirmation)
    by_hotel_date = schema.qualified(schema.by_hotel_date)
    select_columns = ', '.join(RESERVATION_COLUMNS)

    return {
        ReservationStatement.EXISTS_BY_CONFIRMATION: (
            f'SELECT {CONFIRMATION_NUMBER} FROM {by_confirmation} WHERE {CONFIRMATION_NUMBER} = ?'
        ),
        ReservationStatement.FIND_BY_CONFIRMATION: (
            f'SELECT {select_columns} FROM {by_confirmation} WHERE {CONFIRMATION_NUMBER} = ?'
        ),
        ReservationStatement.FIND_BY_HOTEL_DATE: (
            f'SELECT {select_columns} FROM {by_hotel_date} '
            f'WHERE {HOTEL_ID} = ? AND {START_DATE} = ?'
        ),
        ReservationStatement.FIND_ALL: f'SELECT {select_columns} FROM {by_confirmation}',
        ReservationStatement.INSERT_BY_HOTEL_DATE: _insert_cql(
            by_hotel_date, schema.by_hotel_date
        ),
        ReservationStatement.INSERT_BY_CONFIRMATION: _insert_cql(
            by_confirmation, schema.by_confirmation
        ),
        ReservationStatement.DELETE_BY_CONFIRMATION: (
            f'DELETE FROM {by_confirmation} WHERE {CONFIRMATION_NUMBER} = ?'
        ),
        ReservationStatement.DELETE_BY_HOTEL_DATE: (
            f'DELETE FROM {by_hotel_date} '
            f'WHERE {HOTEL_ID} = ? AND {START_DATE} = ? AND {ROOM_NUMBER} = ?'
        ),
    }


class ReservationStatementCache:
    def __init__(
        self,
        *,
        statements: Mapping[ReservationStatement, PreparedStatement],
        write_consistency: int,
    ) -> None:
        self._statements = MappingProxyType(dict(statements))
        self.write_consistency = write_consistency

    @classmethod
    def prepare(
        cls,
        session: Any,
        schema: ReservationSchema,
        *,
        read_consistency: int,
        write_consistency: int,
    ) -> 'ReservationStatementCache':
        """Blocking. One round trip per statement, run after the schema bootstrap."""
        statements = {}
        for name, cql in build_statement_cql(schema).items():
            prepared = session.prepare(cql)
            prepared.consistency_level = (
                read_consistency if name in READ_STATEMENTS else write_consistency
            )
            statements[name] = prepared
        return cls(statements=statements, write_consistency=write_consistency)

    def __getitem__(self, name: ReservationStatement) -> PreparedStatement:
        return self._statements[name]

    def bind(self, name: ReservationStatement, values: Sequence[Any]) -> BoundStatement:
        prepared = self._statements[name]
        expected = len(prepared.column_metadata)
        # Protocol v4 pads missing trailing values with UNSET instead of failing
        if len(values) != expected:
            raise StatementBindingError(
                f'expected {expected} values, got {len(values)}', statement=str(name)
            )
        try:
            return prepared.bind(values)
        except (TypeError, ValueError) as e:
            raise StatementBindingError(str(e), statement=str(name)) from e

    def logged_batch(self, *bound: BoundStatement) -> BatchStatement:
        batch = BatchStatement(batch_type=BatchType.LOGGED, consistency_level=self.write_consistency)
        for statement in bound:
            batch.add(statement)
        return batch
