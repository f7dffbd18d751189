"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.hotel_reservation.app.command import (
    create_reservation_use_case,
    delete_reservation_use_case,
    upsert_reservation_use_case,
)
from src.service.hotel_reservation.app.query import (
    get_reservation_use_case,
    list_reservations_use_case,
)
from src.service.hotel_reservation.driving_adapter.http_controller import reservation_controller


WIRE_MODULES: list[ModuleType] = [
    create_reservation_use_case,
    upsert_reservation_use_case,
    delete_reservation_use_case,
    get_reservation_use_case,
    list_reservations_use_case,
    reservation_controller,
]
