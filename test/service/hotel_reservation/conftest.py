"""
Fixtures for the hotel reservation tests.

In-memory stand-ins for the ScyllaDB session and the statement cache.
FakeSession keeps the two reservation tables as dicts keyed by their primary keys
and returns rows shaped like the driver's named tuples (dates as cassandra.util.Date).
"""

from datetime import date
from types import SimpleNamespace
from typing import Any, Iterable, List, Optional

import attrs
from cassandra.util import Date
import pytest

from src.service.hotel_reservation.driven_adapter.repo.reservation_statement_cache import (
    ReservationStatement,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_repo_scylla_impl import (
    ReservationRepoScyllaImpl,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_table_schema import (
    RESERVATIONS_BY_CONFIRMATION,
    RESERVATIONS_BY_HOTEL_DATE,
    ReservationSchema,
)


@attrs.define
class FakeBound:
    name: ReservationStatement
    values: tuple


class FakeBatch(list):
    batch_type = 'LOGGED'


class FakeStatementCache:
    def bind(self, name: ReservationStatement, values: Iterable[Any]) -> FakeBound:
        return FakeBound(name=name, values=tuple(values))

    def logged_batch(self, *bound: FakeBound) -> FakeBatch:
        return FakeBatch(bound)


def fake_statement_cache_factory(session: Any, schema: Any, **_: Any) -> FakeStatementCache:
    return FakeStatementCache()


class FakeResultSet:
    def __init__(self, pages: List[List[Any]]) -> None:
        self._pages = pages or [[]]
        self._page = 0
        self.fetch_count = 0

    @classmethod
    def of(cls, rows: Iterable[Any]) -> 'FakeResultSet':
        return cls([list(rows)])

    @property
    def current_rows(self) -> List[Any]:
        return self._pages[self._page]

    @property
    def has_more_pages(self) -> bool:
        return self._page < len(self._pages) - 1

    def fetch_next_page(self) -> None:
        self._page += 1
        self.fetch_count += 1

    def one(self) -> Optional[Any]:
        return self.current_rows[0] if self.current_rows else None

    def __iter__(self):
        for index in range(self._page, len(self._pages)):
            yield from self._pages[index]


def _to_row(column_names: tuple, values: tuple) -> SimpleNamespace:
    columns = dict(zip(column_names, values, strict=True))
    for name, value in columns.items():
        if isinstance(value, date):
            columns[name] = Date(value)
    return SimpleNamespace(**columns)


def _as_date(value: Any) -> date:
    return value.date() if isinstance(value, Date) else value


class FakeSession:
    def __init__(self) -> None:
        self.by_confirmation: dict[str, SimpleNamespace] = {}
        self.by_hotel_date: dict[tuple, SimpleNamespace] = {}
        self.ddl: List[str] = []
        self.batches: List[FakeBatch] = []
        self.executed: List[Any] = []
        self.keyspace: Optional[str] = None
        self.fail_with: Optional[Exception] = None

    def set_keyspace(self, keyspace: str) -> None:
        self.keyspace = keyspace

    def execute(self, statement: Any, parameters: Any = None) -> FakeResultSet:
        if self.fail_with is not None:
            raise self.fail_with
        self.executed.append(statement)

        if isinstance(statement, str):
            self.ddl.append(statement)
            self._apply_ddl(statement)
            return FakeResultSet.of([])
        if isinstance(statement, FakeBatch):
            self.batches.append(statement)
            for bound in statement:
                self._apply(bound)
            return FakeResultSet.of([])
        return self._apply(statement)

    def _apply_ddl(self, cql: str) -> None:
        # CREATE ... IF NOT EXISTS leaves rows alone, drops and truncates empty tables
        if cql.startswith('DROP KEYSPACE'):
            self.by_confirmation.clear()
            self.by_hotel_date.clear()
        elif cql.startswith(('TRUNCATE', 'DROP TABLE')):
            table_name = cql.split()[-1].rsplit('.', 1)[-1]
            rows = {
                RESERVATIONS_BY_CONFIRMATION.name: self.by_confirmation,
                RESERVATIONS_BY_HOTEL_DATE.name: self.by_hotel_date,
            }.get(table_name)
            if rows is not None:
                rows.clear()

    def _apply(self, bound: FakeBound) -> FakeResultSet:
        name, values = bound.name, bound.values

        if name in (
            ReservationStatement.EXISTS_BY_CONFIRMATION,
            ReservationStatement.FIND_BY_CONFIRMATION,
        ):
            row = self.by_confirmation.get(values[0])
            return FakeResultSet.of([row] if row else [])
        if name == ReservationStatement.FIND_ALL:
            return FakeResultSet.of(self.by_confirmation.values())
        if name == ReservationStatement.FIND_BY_HOTEL_DATE:
            hotel_id, start_date = values
            rows = [
                row
                for (row_hotel, row_date, _), row in sorted(
                    self.by_hotel_date.items(), key=lambda item: item[0][2]
                )
                if row_hotel == hotel_id and row_date == start_date
            ]
            return FakeResultSet.of(rows)
        if name == ReservationStatement.INSERT_BY_CONFIRMATION:
            row = _to_row(RESERVATIONS_BY_CONFIRMATION.column_names, values)
            self.by_confirmation[row.confirmation_number] = row
            return FakeResultSet.of([])
        if name == ReservationStatement.INSERT_BY_HOTEL_DATE:
            row = _to_row(RESERVATIONS_BY_HOTEL_DATE.column_names, values)
            key = (row.hotel_id, _as_date(row.start_date), row.room_number)
            self.by_hotel_date[key] = row
            return FakeResultSet.of([])
        if name == ReservationStatement.DELETE_BY_CONFIRMATION:
            self.by_confirmation.pop(values[0], None)
            return FakeResultSet.of([])
        if name == ReservationStatement.DELETE_BY_HOTEL_DATE:
            self.by_hotel_date.pop(tuple(values), None)
            return FakeResultSet.of([])
        raise AssertionError(f'unexpected statement {name}')


class FakeSessionHandle:
    def __init__(self, session: Optional[FakeSession] = None) -> None:
        self._session = session or FakeSession()
        self.connect_calls = 0
        self.shutdown_calls = 0

    @property
    def session(self) -> FakeSession:
        if self.shutdown_calls:
            raise RuntimeError('ScyllaDB session handle has been shut down')
        return self._session

    def connect(self) -> FakeSession:
        self.connect_calls += 1
        return self._session

    def shutdown(self) -> None:
        self.shutdown_calls += 1


# ==================== Fixtures ====================


@pytest.fixture
def schema() -> ReservationSchema:
    return ReservationSchema(keyspace='reservation_test')


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def session_handle(fake_session: FakeSession) -> FakeSessionHandle:
    return FakeSessionHandle(fake_session)


@pytest.fixture
def result_set_type() -> type[FakeResultSet]:
    return FakeResultSet


@pytest.fixture
def build_repo(session_handle: FakeSessionHandle, schema: ReservationSchema):
    """Factory: build_repo(**overrides) -> uninitialized repository over the fake session"""

    def _build(**overrides: Any) -> ReservationRepoScyllaImpl:
        kwargs: dict[str, Any] = {
            'session_handle': session_handle,
            'schema': schema,
            'statement_cache_factory': fake_statement_cache_factory,
        }
        kwargs.update(overrides)
        return ReservationRepoScyllaImpl(**kwargs)

    return _build


@pytest.fixture
async def repo(build_repo) -> ReservationRepoScyllaImpl:
    repository = build_repo()
    await repository.initialize()
    return repository
