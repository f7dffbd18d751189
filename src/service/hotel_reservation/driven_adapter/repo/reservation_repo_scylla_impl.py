import asyncio
import time
from collections.abc import AsyncIterator
from datetime import date
from functools import partial
from typing import Any, Callable, List, Optional

import anyio.to_thread
from cassandra import (
    ConsistencyLevel,
    DriverException,
    OperationTimedOut,
    RequestValidationException,
    Timeout,
)
from cassandra.cluster import NoHostAvailable
from opentelemetry import trace

from src.platform.database.scylla_setting import ScyllaSessionHandle
from src.platform.exception.exceptions import (
    ConfirmationNumberExhaustedError,
    InvalidArgumentError,
    StorageRequestError,
    StorageTimeoutError,
    StorageUnavailableError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.reservation_metrics import metrics
from src.service.hotel_reservation.app.interface.i_reservation_repo import IReservationRepo
from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation
from src.service.hotel_reservation.domain.value_object.confirmation_number import (
    DEFAULT_CONFIRMATION_NUMBER_LENGTH,
    generate_confirmation_number,
    validate_confirmation_number,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_row_mapper import (
    ReservationRowMapper,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_schema_manager import (
    ReservationSchemaManager,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_statement_cache import (
    ReservationStatement,
    ReservationStatementCache,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_table_schema import (
    ReservationSchema,
)


class ReservationRepoScyllaImpl(IReservationRepo):
    """
    ScyllaDB Reservation Repository - Data Access Layer

    Denormalization:
    - reservations_by_confirmation: point lookups, existence checks, full scans
    - reservations_by_hotel_date: one partition per (hotel, start date), rooms ascending
    - Both rows are written and deleted in the same LOGGED batch

    Lifecycle:
    - initialize(): connect -> bootstrap schema -> prepare statements (idempotent)
      a failed initialize releases the session handle before re-raising
    - shutdown(): release the session handle exactly once
    - Also usable as `async with ReservationRepoScyllaImpl(...) as repo:`

    Driver calls are blocking and run on worker threads. Nothing is retried here:
    timeouts and unavailability surface as retryable storage errors, requests the
    cluster rejects (invalid CQL, missing privilege) as non-retryable ones.
    """

    def __init__(
        self,
        *,
        session_handle: ScyllaSessionHandle,
        schema: ReservationSchema,
        read_consistency: int = ConsistencyLevel.LOCAL_ONE,
        write_consistency: int = ConsistencyLevel.LOCAL_QUORUM,
        drop_schema: bool = False,
        confirmation_number_generator: Callable[[int], str] = generate_confirmation_number,
        confirmation_number_length: int = DEFAULT_CONFIRMATION_NUMBER_LENGTH,
        max_confirmation_attempts: int = 10,
        statement_cache_factory: Callable[..., ReservationStatementCache] = (
            ReservationStatementCache.prepare
        ),
        schema_manager_factory: Callable[..., ReservationSchemaManager] = ReservationSchemaManager,
    ) -> None:
        self.session_handle = session_handle
        self.schema = schema
        self.read_consistency = read_consistency
        self.write_consistency = write_consistency
        self.drop_schema = drop_schema
        self.confirmation_number_generator = confirmation_number_generator
        self.confirmation_number_length = confirmation_number_length
        self.max_confirmation_attempts = max_confirmation_attempts
        self.statement_cache_factory = statement_cache_factory
        self.schema_manager_factory = schema_manager_factory
        self.mapper = ReservationRowMapper(schema)

        self._statements: Optional[ReservationStatementCache] = None
        self._init_lock = asyncio.Lock()
        self._tracer: trace.Tracer | None = None

    @property
    def tracer(self) -> trace.Tracer:
        """Lazy initialize tracer to ensure TracerProvider is set up"""
        if self._tracer is None:
            self._tracer = trace.get_tracer(__name__)
        return self._tracer

    @property
    def statements(self) -> ReservationStatementCache:
        if self._statements is None:
            raise RuntimeError('Reservation repository is not initialized')
        return self._statements

    # ========== Lifecycle ==========

    async def initialize(self) -> None:
        async with self._init_lock:
            if self._statements is not None:
                return

            try:
                session = await anyio.to_thread.run_sync(self.session_handle.connect)
                schema_manager = self.schema_manager_factory(session=session, schema=self.schema)
                await anyio.to_thread.run_sync(
                    partial(schema_manager.bootstrap, drop_keyspace=self.drop_schema)
                )
                self._statements = await anyio.to_thread.run_sync(
                    partial(
                        self.statement_cache_factory,
                        session,
                        self.schema,
                        read_consistency=self.read_consistency,
                        write_consistency=self.write_consistency,
                    )
                )
            except BaseException:
                # __aexit__ never runs when __aenter__ raises, release the handle here
                Logger.base.error('❌ [Reservation] Repository initialization failed')
                await anyio.to_thread.run_sync(self.session_handle.shutdown)
                raise

            Logger.base.info('✅ [Reservation] Repository initialized')

    async def shutdown(self) -> None:
        self._statements = None
        await anyio.to_thread.run_sync(self.session_handle.shutdown)

    async def __aenter__(self) -> 'ReservationRepoScyllaImpl':
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()

    # ========== Execution ==========

    def _run_blocking(self, fn: Callable[[], Any], *, operation: str, key: Any) -> Any:
        """Runs in a worker thread. Translates driver failures into storage errors."""
        started = time.perf_counter()
        try:
            result = fn()
        except (OperationTimedOut, Timeout) as e:
            metrics.record_operation(
                operation=operation, result='timeout', duration=time.perf_counter() - started
            )
            raise StorageTimeoutError(str(e), operation=operation, key=key) from e
        except RequestValidationException as e:
            metrics.record_operation(
                operation=operation, result='rejected', duration=time.perf_counter() - started
            )
            raise StorageRequestError(str(e), operation=operation, key=key) from e
        except (NoHostAvailable, DriverException) as e:
            metrics.record_operation(
                operation=operation, result='error', duration=time.perf_counter() - started
            )
            raise StorageUnavailableError(str(e), operation=operation, key=key) from e
        metrics.record_operation(
            operation=operation, result='success', duration=time.perf_counter() - started
        )
        return result

    async def _execute(self, statement: Any, *, operation: str, key: Any = None) -> Any:
        session = self.session_handle.session
        return await anyio.to_thread.run_sync(
            partial(
                self._run_blocking,
                partial(session.execute, statement),
                operation=operation,
                key=key,
            )
        )

    async def _fetch_all(self, statement: Any, *, operation: str, key: Any = None) -> List[Any]:
        # Iterating a ResultSet fetches further pages synchronously, keep it off the loop
        session = self.session_handle.session
        return await anyio.to_thread.run_sync(
            partial(
                self._run_blocking,
                lambda: list(session.execute(statement)),
                operation=operation,
                key=key,
            )
        )

    # ========== Queries ==========

    @Logger.io
    async def exists(self, confirmation_number: str) -> bool:
        validate_confirmation_number(confirmation_number)
        statement = self.statements.bind(
            ReservationStatement.EXISTS_BY_CONFIRMATION, (confirmation_number,)
        )
        result = await self._execute(statement, operation='exists', key=confirmation_number)
        return result.one() is not None

    @Logger.io
    async def find_by_confirmation_number(self, confirmation_number: str) -> Optional[Reservation]:
        validate_confirmation_number(confirmation_number)
        statement = self.statements.bind(
            ReservationStatement.FIND_BY_CONFIRMATION, (confirmation_number,)
        )
        result = await self._execute(
            statement, operation='find_by_confirmation_number', key=confirmation_number
        )
        row = result.one()

        if not row:
            return None

        return self.mapper.from_row(row)

    @Logger.io
    async def find_all(self) -> List[Reservation]:
        """
        Full scan of reservations_by_confirmation.

        Note: touches every partition of the table. Intended for small data sets and
        administration, not for request paths at scale.
        """
        statement = self.statements.bind(ReservationStatement.FIND_ALL, ())
        rows = await self._fetch_all(statement, operation='find_all')
        return [self.mapper.from_row(row) for row in rows]

    async def iter_all(self) -> AsyncIterator[Reservation]:
        statement = self.statements.bind(ReservationStatement.FIND_ALL, ())
        result = await self._execute(statement, operation='iter_all')
        while True:
            for row in result.current_rows:
                yield self.mapper.from_row(row)
            if not result.has_more_pages:
                return
            await anyio.to_thread.run_sync(
                partial(
                    self._run_blocking, result.fetch_next_page, operation='iter_all', key=None
                )
            )

    @Logger.io
    async def find_by_hotel_and_date(self, hotel_id: str, start_date: date) -> List[Reservation]:
        if not isinstance(hotel_id, str) or not hotel_id:
            raise InvalidArgumentError('hotel_id may not be null nor empty')
        if not isinstance(start_date, date) or hasattr(start_date, 'hour'):
            raise InvalidArgumentError('start_date must be a calendar date')

        key = (hotel_id, start_date)
        statement = self.statements.bind(ReservationStatement.FIND_BY_HOTEL_DATE, key)
        rows = await self._fetch_all(statement, operation='find_by_hotel_and_date', key=key)
        return [self.mapper.from_row(row) for row in rows]

    # ========== Commands ==========

    async def _new_confirmation_number(self) -> str:
        for attempt in range(1, self.max_confirmation_attempts + 1):
            candidate = self.confirmation_number_generator(self.confirmation_number_length)
            if not await self.exists(candidate):
                return candidate
            metrics.record_confirmation_number_collision()
            Logger.base.warning(
                f'⚠️ [Reservation] Confirmation number {candidate} taken '
                f'(attempt {attempt}/{self.max_confirmation_attempts})'
            )
        raise ConfirmationNumberExhaustedError(attempts=self.max_confirmation_attempts)

    @Logger.io
    async def upsert(self, reservation: Reservation) -> str:
        """
        Insert into both tables in one LOGGED batch.

        Note: the generated number is checked with a read before the write, two
        concurrent creates can still pick the same number (last batch wins).
        A changed hotel/start date/room on an existing number leaves the previous
        reservations_by_hotel_date row behind.
        """
        reservation.validate()
        confirmation_number = (
            reservation.confirmation_number or await self._new_confirmation_number()
        )
        stored = reservation.with_confirmation_number(confirmation_number)

        with self.tracer.start_as_current_span('db.reservation.upsert') as span:
            span.set_attribute('reservation.confirmation_number', confirmation_number)
            span.set_attribute('reservation.hotel_id', stored.hotel_id)

            batch = self.statements.logged_batch(
                self.statements.bind(
                    ReservationStatement.INSERT_BY_HOTEL_DATE,
                    self.mapper.to_hotel_date_row(stored),
                ),
                self.statements.bind(
                    ReservationStatement.INSERT_BY_CONFIRMATION,
                    self.mapper.to_confirmation_row(stored),
                ),
            )
            await self._execute(batch, operation='upsert', key=confirmation_number)

        return confirmation_number

    @Logger.io
    async def delete(self, confirmation_number: str) -> bool:
        existing = await self.find_by_confirmation_number(confirmation_number)
        if existing is None:
            return False

        with self.tracer.start_as_current_span('db.reservation.delete') as span:
            span.set_attribute('reservation.confirmation_number', confirmation_number)

            batch = self.statements.logged_batch(
                self.statements.bind(
                    ReservationStatement.DELETE_BY_HOTEL_DATE,
                    self.mapper.hotel_date_key(existing),
                ),
                self.statements.bind(
                    ReservationStatement.DELETE_BY_CONFIRMATION,
                    self.mapper.confirmation_key(existing),
                ),
            )
            await self._execute(batch, operation='delete', key=confirmation_number)

        return True
