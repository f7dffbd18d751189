"""
Reservation schema descriptor

Column, type and table names are part of the storage contract. They are kept in one
immutable value built at startup and handed to the schema manager, the statement
cache and the row mapper, so no component owns its own copy of a name.

Tables (one per access pattern, same reservation stored in each):
- reservations_by_confirmation: PRIMARY KEY (confirmation_number)
- reservations_by_hotel_date:   PRIMARY KEY ((hotel_id, start_date), room_number)
- reservations_by_guest:        PRIMARY KEY ((guest_last_name), hotel_id)
- guests:                       PRIMARY KEY (guest_id), addresses use the address UDT
"""

from typing import Tuple

import attrs


Column = Tuple[str, str]  # (name, cql type)


@attrs.frozen
class UserTypeDefinition:
    name: str
    fields: Tuple[Column, ...]

    def create_cql(self, keyspace: str) -> str:
        fields = ', '.join(f'{name} {cql_type}' for name, cql_type in self.fields)
        return f'CREATE TYPE IF NOT EXISTS {keyspace}.{self.name} ({fields})'


@attrs.frozen
class TableDefinition:
    name: str
    partition_key: Tuple[Column, ...]
    clustering_key: Tuple[Column, ...] = ()
    columns: Tuple[Column, ...] = ()
    clustering_order: Tuple[Tuple[str, str], ...] = ()
    comment: str = ''

    @property
    def all_columns(self) -> Tuple[Column, ...]:
        return self.partition_key + self.clustering_key + self.columns

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.all_columns)

    @property
    def primary_key_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.partition_key + self.clustering_key)

    def primary_key_cql(self) -> str:
        partition = ', '.join(name for name, _ in self.partition_key)
        if len(self.partition_key) > 1:
            partition = f'({partition})'
        clustering = [name for name, _ in self.clustering_key]
        return ', '.join([partition, *clustering])

    def create_cql(self, keyspace: str) -> str:
        column_defs = ',\n    '.join(f'{name} {cql_type}' for name, cql_type in self.all_columns)
        cql = (
            f'CREATE TABLE IF NOT EXISTS {keyspace}.{self.name} (\n'
            f'    {column_defs},\n'
            f'    PRIMARY KEY ({self.primary_key_cql()})\n'
            f')'
        )
        options = []
        if self.clustering_order:
            order = ', '.join(f'{name} {direction}' for name, direction in self.clustering_order)
            options.append(f'CLUSTERING ORDER BY ({order})')
        if self.comment:
            escaped = self.comment.replace("'", "''")
            options.append(f"comment = '{escaped}'")
        if options:
            cql += ' WITH ' + ' AND '.join(options)
        return cql


# Column names
HOTEL_ID = 'hotel_id'
START_DATE = 'start_date'
END_DATE = 'end_date'
ROOM_NUMBER = 'room_number'
CONFIRMATION_NUMBER = 'confirmation_number'
GUEST_ID = 'guest_id'
GUEST_LAST_NAME = 'guest_last_name'


ADDRESS_TYPE = UserTypeDefinition(
    name='address',
    fields=(
        ('street', 'text'),
        ('city', 'text'),
        ('state_or_province', 'text'),
        ('postal_code', 'text'),
        ('country', 'text'),
    ),
)

RESERVATIONS_BY_CONFIRMATION = TableDefinition(
    name='reservations_by_confirmation',
    partition_key=((CONFIRMATION_NUMBER, 'text'),),
    columns=(
        (HOTEL_ID, 'text'),
        (START_DATE, 'date'),
        (END_DATE, 'date'),
        (ROOM_NUMBER, 'smallint'),
        (GUEST_ID, 'uuid'),
    ),
    comment='Find reservation by confirmation number',
)

RESERVATIONS_BY_HOTEL_DATE = TableDefinition(
    name='reservations_by_hotel_date',
    partition_key=((HOTEL_ID, 'text'), (START_DATE, 'date')),
    clustering_key=((ROOM_NUMBER, 'smallint'),),
    columns=(
        (END_DATE, 'date'),
        (CONFIRMATION_NUMBER, 'text'),
        (GUEST_ID, 'uuid'),
    ),
    clustering_order=((ROOM_NUMBER, 'ASC'),),
    comment='Find reservations by hotel and date',
)

RESERVATIONS_BY_GUEST = TableDefinition(
    name='reservations_by_guest',
    partition_key=((GUEST_LAST_NAME, 'text'),),
    clustering_key=((HOTEL_ID, 'text'),),
    columns=(
        (START_DATE, 'date'),
        (END_DATE, 'date'),
        (ROOM_NUMBER, 'smallint'),
        (CONFIRMATION_NUMBER, 'text'),
        (GUEST_ID, 'uuid'),
    ),
    comment='Find reservations by guest name',
)

GUESTS = TableDefinition(
    name='guests',
    partition_key=((GUEST_ID, 'uuid'),),
    columns=(
        ('first_name', 'text'),
        ('last_name', 'text'),
        ('title', 'text'),
        ('emails', 'set<text>'),
        ('phone_numbers', 'list<text>'),
        ('addresses', f'map<text, frozen<{ADDRESS_TYPE.name}>>'),
        (CONFIRMATION_NUMBER, 'text'),
    ),
    comment='Find guest by ID',
)


@attrs.frozen
class ReservationSchema:
    keyspace: str
    replication_factor: int = 1
    address_type: UserTypeDefinition = ADDRESS_TYPE
    by_confirmation: TableDefinition = RESERVATIONS_BY_CONFIRMATION
    by_hotel_date: TableDefinition = RESERVATIONS_BY_HOTEL_DATE
    by_guest: TableDefinition = RESERVATIONS_BY_GUEST
    guests: TableDefinition = GUESTS

    @property
    def tables(self) -> Tuple[TableDefinition, ...]:
        # Creation order: the guests table needs the address type
        return (self.by_hotel_date, self.by_confirmation, self.by_guest, self.guests)

    def qualified(self, table: TableDefinition) -> str:
        return f'{self.keyspace}.{table.name}'
