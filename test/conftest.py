"""
Test Configuration and Fixtures

Architecture:
- Unit tests (test/**/unit/): the cluster is replaced by in-memory fakes (test/service/hotel_reservation/conftest.py)
- Integration tests (test/**/integration/): real ScyllaDB, skipped when no node is reachable
"""

# =============================================================================
# Environment setup MUST happen before any application import:
# settings and the loguru sinks are configured at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ.setdefault('DEBUG', 'false')
    os.environ.setdefault('SCYLLA_KEYSPACE', 'reservation_test')
    os.environ.setdefault('SCYLLA_DROP_SCHEMA', 'false')


_early_setup_test_environment()

from datetime import date  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402

from src.service.hotel_reservation.domain.entity.reservation_entity import (  # noqa: E402
    Reservation,
)


GUEST_ID = UUID('1b4d86f4-ccff-4256-a63d-45c905df2677')


@pytest.fixture
def reservation() -> Reservation:
    """The reservation used across tests: hotel 12345, 2020-12-18, room 42"""
    return Reservation(
        hotel_id='12345',
        start_date=date(2020, 12, 18),
        end_date=date(2020, 12, 21),
        room_number=42,
        guest_id=GUEST_ID,
    )
