"""
Reservation Schema Manager

Provisions the keyspace, the address UDT and the reservation tables.
Every CREATE uses IF NOT EXISTS, so bootstrap() can run on every startup.

Blocking: call from a worker thread (anyio.to_thread.run_sync) inside the service.
"""

from typing import Any, Optional

from cassandra import AlreadyExists, DriverException
from cassandra.cluster import NoHostAvailable

from src.platform.exception.exceptions import SchemaConflictError
from src.platform.logging.loguru_io import Logger
from src.service.hotel_reservation.driven_adapter.repo.reservation_table_schema import (
    ReservationSchema,
    TableDefinition,
    UserTypeDefinition,
)


class ReservationSchemaManager:
    def __init__(self, *, session: Any, schema: ReservationSchema) -> None:
        self.session = session
        self.schema = schema

    def _run(self, cql: str) -> None:
        try:
            self.session.execute(cql)
        except AlreadyExists:
            # Raced with another node creating the same object
            Logger.base.debug(f'📋 [Schema] Already exists: {cql.splitlines()[0]}')
        except (NoHostAvailable, DriverException) as e:
            raise SchemaConflictError(f'Schema statement failed: {e}', statement=cql) from e

    def drop_keyspace(self) -> None:
        Logger.base.warning(f'🗑️  [Schema] Dropping keyspace {self.schema.keyspace}')
        self._run(f'DROP KEYSPACE IF EXISTS {self.schema.keyspace}')

    def ensure_keyspace(self, replication_factor: Optional[int] = None) -> None:
        factor = (
            self.schema.replication_factor if replication_factor is None else replication_factor
        )
        self._run(
            f'CREATE KEYSPACE IF NOT EXISTS {self.schema.keyspace} '
            f"WITH replication = {{'class': 'SimpleStrategy', 'replication_factor': {factor}}}"
        )

    def ensure_type(self, user_type: UserTypeDefinition) -> None:
        self._run(user_type.create_cql(self.schema.keyspace))

    def ensure_table(self, table: TableDefinition) -> None:
        self._run(table.create_cql(self.schema.keyspace))

    def bootstrap(self, *, drop_keyspace: bool = False) -> None:
        """
        keyspace -> address type -> tables, then select the keyspace on the session.

        drop_keyspace=True deletes every row first. Only the reset script and
        SCYLLA_DROP_SCHEMA=true ask for it.
        """
        if drop_keyspace:
            self.drop_keyspace()

        self.ensure_keyspace()
        self.ensure_type(self.schema.address_type)
        for table in self.schema.tables:
            self.ensure_table(table)

        self.session.set_keyspace(self.schema.keyspace)
        Logger.base.info(
            f'✅ [Schema] Keyspace {self.schema.keyspace} ready '
            f'({len(self.schema.tables)} tables)'
        )

    def truncate_tables(self) -> None:
        for table in self.schema.tables:
            self._run(f'TRUNCATE TABLE {self.schema.qualified(table)}')

    def drop_tables(self) -> None:
        for table in reversed(self.schema.tables):
            self._run(f'DROP TABLE IF EXISTS {self.schema.qualified(table)}')
