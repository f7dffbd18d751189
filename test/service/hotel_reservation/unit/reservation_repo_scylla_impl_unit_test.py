"""
Unit tests for ReservationRepoScyllaImpl over the in-memory session

Test Coverage:
1. Lifecycle (initialize once, shutdown once, async context manager, failed startup)
2. Round trip and two-table consistency of upsert/delete
3. Existence semantics and hotel/date queries
4. Confirmation number generation (collisions, exhaustion, uniqueness)
5. Driver failures translated into storage errors (retryable or rejected)
"""

from datetime import date
from uuid import uuid4

import attrs
from cassandra import (
    InvalidRequest,
    OperationTimedOut,
    Unauthorized,
    Unavailable,
    WriteTimeout,
    WriteType,
)
from cassandra.cluster import NoHostAvailable
from prometheus_client import REGISTRY
import pytest

from src.platform.exception.exceptions import (
    ConfirmationNumberExhaustedError,
    InvalidArgumentError,
    SchemaConflictError,
    StorageRequestError,
    StorageTimeoutError,
    StorageUnavailableError,
)
from src.service.hotel_reservation.domain.entity.reservation_entity import Reservation
from src.service.hotel_reservation.driven_adapter.repo.reservation_statement_cache import (
    ReservationStatement,
)


pytestmark = pytest.mark.unit


def _sequence_generator(*numbers: str):
    iterator = iter(numbers)
    return lambda length: next(iterator)


def _collisions() -> float:
    return REGISTRY.get_sample_value('reservation_confirmation_number_collisions_total') or 0.0


class _FailingSchemaManager:
    def __init__(self, *, session, schema) -> None:
        self.session = session

    def bootstrap(self, *, drop_keyspace: bool = False) -> None:
        raise SchemaConflictError('Schema statement failed: bad type', statement='CREATE TYPE')


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_connects_bootstraps_and_is_idempotent(
        self, build_repo, session_handle, fake_session
    ):
        repo = build_repo()

        await repo.initialize()
        await repo.initialize()

        assert session_handle.connect_calls == 1
        assert len(fake_session.ddl) == 6  # keyspace, type, 4 tables
        assert fake_session.keyspace == 'reservation_test'

    @pytest.mark.asyncio
    async def test_drop_schema_is_opt_in(self, build_repo, fake_session):
        await build_repo(drop_schema=True).initialize()

        assert fake_session.ddl[0] == 'DROP KEYSPACE IF EXISTS reservation_test'

    @pytest.mark.asyncio
    async def test_operations_require_initialize(self, build_repo):
        repo = build_repo()

        with pytest.raises(RuntimeError, match='not initialized'):
            await repo.exists('ABC123')

    @pytest.mark.asyncio
    async def test_shutdown_releases_handle(self, repo, session_handle):
        await repo.shutdown()

        assert session_handle.shutdown_calls == 1
        with pytest.raises(RuntimeError):
            await repo.find_all()

    @pytest.mark.asyncio
    async def test_async_context_manager(self, build_repo, session_handle, reservation):
        async with build_repo() as repo:
            confirmation_number = await repo.upsert(reservation)
            assert await repo.exists(confirmation_number)

        assert session_handle.connect_calls == 1
        assert session_handle.shutdown_calls == 1

    @pytest.mark.asyncio
    async def test_failed_bootstrap_releases_handle(self, build_repo, session_handle):
        # Given: the session opens but the schema cannot be created
        repo = build_repo(schema_manager_factory=_FailingSchemaManager)

        # When
        with pytest.raises(SchemaConflictError):
            async with repo:
                pytest.fail('body must not run')

        # Then: the opened handle is released once
        assert session_handle.connect_calls == 1
        assert session_handle.shutdown_calls == 1
        with pytest.raises(RuntimeError, match='not initialized'):
            _ = repo.statements

    @pytest.mark.asyncio
    async def test_failed_prepare_releases_handle(self, build_repo, session_handle):
        def failing_statement_cache_factory(*args, **kwargs):
            raise NoHostAvailable('Unable to prepare', {})

        repo = build_repo(statement_cache_factory=failing_statement_cache_factory)

        with pytest.raises(NoHostAvailable):
            await repo.initialize()

        assert session_handle.shutdown_calls == 1


class TestUpsert:
    @pytest.mark.asyncio
    async def test_round_trip_with_generated_number(self, repo, reservation: Reservation):
        # When
        confirmation_number = await repo.upsert(reservation)

        # Then
        assert len(confirmation_number) == 6
        found = await repo.find_by_confirmation_number(confirmation_number)
        assert found == reservation.with_confirmation_number(confirmation_number)

    @pytest.mark.asyncio
    async def test_caller_object_is_not_mutated(self, repo, reservation: Reservation):
        await repo.upsert(reservation)

        assert reservation.confirmation_number is None

    @pytest.mark.asyncio
    async def test_supplied_number_is_kept(self, repo, reservation: Reservation):
        confirmation_number = await repo.upsert(reservation.with_confirmation_number('XYZ789'))

        assert confirmation_number == 'XYZ789'
        assert await repo.exists('XYZ789')

    @pytest.mark.asyncio
    async def test_both_tables_written_in_one_logged_batch(
        self, repo, fake_session, reservation: Reservation
    ):
        # When
        confirmation_number = await repo.upsert(reservation)

        # Then: exactly one batch holding both inserts
        assert len(fake_session.batches) == 1
        batch = fake_session.batches[0]
        assert batch.batch_type == 'LOGGED'
        assert [bound.name for bound in batch] == [
            ReservationStatement.INSERT_BY_HOTEL_DATE,
            ReservationStatement.INSERT_BY_CONFIRMATION,
        ]

        # And: both projections hold the same reservation
        assert set(fake_session.by_confirmation) == {confirmation_number}
        assert list(fake_session.by_hotel_date) == [('12345', date(2020, 12, 18), 42)]
        hotel_date_row = fake_session.by_hotel_date[('12345', date(2020, 12, 18), 42)]
        assert hotel_date_row.confirmation_number == confirmation_number

    @pytest.mark.asyncio
    async def test_invalid_reservation_is_rejected_before_io(
        self, repo, fake_session, reservation: Reservation
    ):
        executed_before = len(fake_session.executed)
        reversed_stay = attrs.evolve(reservation, end_date=date(2020, 12, 1))

        with pytest.raises(InvalidArgumentError):
            await repo.upsert(reversed_stay)

        assert len(fake_session.executed) == executed_before

    @pytest.mark.asyncio
    async def test_existing_number_is_replaced(self, repo, reservation: Reservation):
        await repo.upsert(reservation.with_confirmation_number('XYZ789'))
        updated = attrs.evolve(reservation, end_date=date(2020, 12, 25))

        await repo.upsert(updated.with_confirmation_number('XYZ789'))

        found = await repo.find_by_confirmation_number('XYZ789')
        assert found is not None
        assert found.end_date == date(2020, 12, 25)
        assert len(await repo.find_all()) == 1

    @pytest.mark.asyncio
    async def test_changed_room_leaves_previous_hotel_date_row(
        self, repo, reservation: Reservation
    ):
        # Known limitation: upsert does not read before write
        await repo.upsert(reservation.with_confirmation_number('XYZ789'))
        moved = attrs.evolve(reservation, room_number=43)

        await repo.upsert(moved.with_confirmation_number('XYZ789'))

        rooms = await repo.find_by_hotel_and_date('12345', date(2020, 12, 18))
        assert [found.room_number for found in rooms] == [42, 43]


class TestConfirmationNumberGeneration:
    @pytest.mark.asyncio
    async def test_taken_number_is_skipped(self, build_repo, reservation: Reservation):
        # Given
        repo = build_repo(
            confirmation_number_generator=_sequence_generator('AAA111', 'AAA111', 'BBB222')
        )
        await repo.initialize()
        collisions_before = _collisions()

        # When
        first = await repo.upsert(reservation)
        second = await repo.upsert(reservation)

        # Then
        assert (first, second) == ('AAA111', 'BBB222')
        assert _collisions() == collisions_before + 1

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise(
        self, build_repo, fake_session, reservation: Reservation
    ):
        # Given: the only number the generator produces is taken
        repo = build_repo(
            confirmation_number_generator=lambda length: 'AAA111', max_confirmation_attempts=3
        )
        await repo.initialize()
        await repo.upsert(reservation)

        # When / Then
        with pytest.raises(ConfirmationNumberExhaustedError) as exc_info:
            await repo.upsert(reservation)

        assert exc_info.value.attempts == 3
        assert exc_info.value.status_code == 503
        assert len(fake_session.batches) == 1

    @pytest.mark.asyncio
    async def test_generated_numbers_are_unique(self, build_repo, reservation: Reservation):
        # Small alphabet space so collisions actually happen
        repo = build_repo(confirmation_number_length=3, max_confirmation_attempts=50)
        await repo.initialize()

        numbers = [await repo.upsert(reservation) for _ in range(10_000)]

        assert len(set(numbers)) == 10_000
        assert all(len(number) == 3 for number in numbers)
        assert len(await repo.find_all()) == 10_000


class TestQueries:
    @pytest.mark.asyncio
    async def test_exists(self, repo, reservation: Reservation):
        confirmation_number = await repo.upsert(reservation)

        assert await repo.exists(confirmation_number) is True
        assert await repo.exists('NOPE00') is False

    @pytest.mark.asyncio
    async def test_missing_reservation_is_none(self, repo):
        assert await repo.find_by_confirmation_number('NOPE00') is None

    @pytest.mark.asyncio
    async def test_malformed_number_is_rejected(self, repo):
        with pytest.raises(InvalidArgumentError):
            await repo.find_by_confirmation_number('bad number')

    @pytest.mark.asyncio
    async def test_find_by_hotel_and_date(self, repo, reservation: Reservation):
        # Given
        confirmation_number = await repo.upsert(reservation)

        # When
        found = await repo.find_by_hotel_and_date('12345', date(2020, 12, 18))

        # Then
        assert len(found) == 1
        assert found[0].room_number == 42
        assert found[0].confirmation_number == confirmation_number
        assert await repo.find_by_hotel_and_date('12345', date(2020, 12, 19)) == []
        assert await repo.find_by_hotel_and_date('99999', date(2020, 12, 18)) == []

    @pytest.mark.asyncio
    async def test_hotel_and_date_rooms_ascending(self, repo, reservation: Reservation):
        for room_number in (301, 7, 42):
            await repo.upsert(attrs.evolve(reservation, room_number=room_number, guest_id=uuid4()))

        found = await repo.find_by_hotel_and_date('12345', date(2020, 12, 18))

        assert [item.room_number for item in found] == [7, 42, 301]

    @pytest.mark.asyncio
    async def test_hotel_id_is_required(self, repo):
        with pytest.raises(InvalidArgumentError, match='hotel_id'):
            await repo.find_by_hotel_and_date('', date(2020, 12, 18))

    @pytest.mark.asyncio
    async def test_find_all(self, repo, reservation: Reservation):
        numbers = {await repo.upsert(reservation) for _ in range(3)}

        found = await repo.find_all()

        assert {item.confirmation_number for item in found} == numbers

    @pytest.mark.asyncio
    async def test_iter_all_follows_pages(
        self, repo, fake_session, result_set_type, reservation: Reservation
    ):
        # Given: three rows spread over two driver pages
        for _ in range(3):
            await repo.upsert(reservation)
        rows = list(fake_session.by_confirmation.values())
        paged = result_set_type([rows[:2], rows[2:]])
        fake_session.execute = lambda statement: paged

        # When
        found = [item async for item in repo.iter_all()]

        # Then
        assert [item.confirmation_number for item in found] == [
            row.confirmation_number for row in rows
        ]
        assert paged.fetch_count == 1


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_both_rows(self, repo, fake_session, reservation: Reservation):
        # Given
        confirmation_number = await repo.upsert(reservation)

        # When
        deleted = await repo.delete(confirmation_number)

        # Then
        assert deleted is True
        assert fake_session.by_confirmation == {}
        assert fake_session.by_hotel_date == {}
        assert [bound.name for bound in fake_session.batches[-1]] == [
            ReservationStatement.DELETE_BY_HOTEL_DATE,
            ReservationStatement.DELETE_BY_CONFIRMATION,
        ]
        assert await repo.exists(confirmation_number) is False

    @pytest.mark.asyncio
    async def test_missing_reservation_writes_nothing(self, repo, fake_session):
        deleted = await repo.delete('NOPE00')

        assert deleted is False
        assert fake_session.batches == []

    @pytest.mark.asyncio
    async def test_second_delete_is_false(self, repo, fake_session, reservation: Reservation):
        confirmation_number = await repo.upsert(reservation)
        await repo.delete(confirmation_number)

        assert await repo.delete(confirmation_number) is False
        assert len(fake_session.batches) == 2


class TestDriverErrors:
    @pytest.mark.asyncio
    async def test_read_timeout_is_storage_timeout(self, repo, fake_session):
        fake_session.fail_with = OperationTimedOut('timed out after 10s')

        with pytest.raises(StorageTimeoutError) as exc_info:
            await repo.find_by_confirmation_number('ABC123')

        error = exc_info.value
        assert error.status_code == 504
        assert error.retryable is True
        assert error.operation == 'find_by_confirmation_number'
        assert error.key == 'ABC123'

    @pytest.mark.asyncio
    async def test_write_timeout_on_batch(self, repo, fake_session, reservation: Reservation):
        fake_session.fail_with = WriteTimeout(
            'batch log write timed out', write_type=WriteType.BATCH_LOG
        )

        with pytest.raises(StorageTimeoutError) as exc_info:
            await repo.upsert(reservation.with_confirmation_number('XYZ789'))

        assert exc_info.value.operation == 'upsert'
        assert exc_info.value.key == 'XYZ789'

    @pytest.mark.parametrize(
        'error',
        [
            Unavailable('not enough replicas'),
            NoHostAvailable('Unable to connect to any servers', {}),
        ],
    )
    @pytest.mark.asyncio
    async def test_unavailable_is_storage_unavailable(self, repo, fake_session, error):
        fake_session.fail_with = error

        with pytest.raises(StorageUnavailableError) as exc_info:
            await repo.exists('ABC123')

        assert not isinstance(exc_info.value, StorageTimeoutError)
        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable is True
        assert exc_info.value.operation == 'exists'


    @pytest.mark.parametrize(
        'error',
        [
            InvalidRequest('unconfigured table reservations_by_confirmation'),
            Unauthorized('User app has no SELECT permission on reservation'),
        ],
    )
    @pytest.mark.asyncio
    async def test_rejected_request_is_not_retryable(self, repo, fake_session, error):
        fake_session.fail_with = error

        with pytest.raises(StorageRequestError) as exc_info:
            await repo.exists('ABC123')

        assert not isinstance(exc_info.value, StorageUnavailableError)
        assert exc_info.value.status_code == 500
        assert exc_info.value.retryable is False
        assert exc_info.value.operation == 'exists'
