"""
Hotel Reservation Service - Main Application
Reservation CRUD and hotel/date lookups over ScyllaDB.

Run:
    uvicorn src.service.hotel_reservation.main:app --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Hotel Reservation] Starting up...')

    tracing = TracingConfig(service_name='hotel-reservation')
    tracing.setup()
    Logger.base.info('📊 [Hotel Reservation] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Hotel Reservation] Dependency injection wired')

    reservation_repo = container.reservation_repo()

    try:
        # Connect, bootstrap schema and prepare statements (fail-fast)
        await reservation_repo.initialize()
        Logger.base.info('🗄️ [Hotel Reservation] Reservation repository ready')

        Logger.base.info('✅ [Hotel Reservation] Startup complete')
        yield
    finally:
        Logger.base.info('🛑 [Hotel Reservation] Shutting down...')

        await reservation_repo.shutdown()
        Logger.base.info('🗄️ [Hotel Reservation] ScyllaDB session closed')

        tracing.shutdown()
        container.unwire()

        Logger.base.info('👋 [Hotel Reservation] Shutdown complete')


app = create_app(lifespan=lifespan)
