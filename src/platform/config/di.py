"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.scylla_setting import (
    ScyllaConnectionDescriptor,
    ScyllaSessionHandle,
    consistency_level_from_name,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_repo_scylla_impl import (
    ReservationRepoScyllaImpl,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_table_schema import (
    ReservationSchema,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # ScyllaDB (one session handle for the whole process, opened by the repository lifespan)
    scylla_connection_descriptor = providers.Singleton(
        ScyllaConnectionDescriptor.from_settings, settings=config_service
    )
    scylla_session_handle = providers.Singleton(
        ScyllaSessionHandle, descriptor=scylla_connection_descriptor
    )
    reservation_schema = providers.Singleton(
        ReservationSchema,
        keyspace=config_service.provided.SCYLLA_KEYSPACE,
        replication_factor=config_service.provided.SCYLLA_REPLICATION_FACTOR,
    )

    # Repositories
    reservation_repo = providers.Singleton(
        ReservationRepoScyllaImpl,
        session_handle=scylla_session_handle,
        schema=reservation_schema,
        read_consistency=providers.Callable(
            consistency_level_from_name, config_service.provided.SCYLLA_READ_CONSISTENCY
        ),
        write_consistency=providers.Callable(
            consistency_level_from_name, config_service.provided.SCYLLA_WRITE_CONSISTENCY
        ),
        drop_schema=config_service.provided.SCYLLA_DROP_SCHEMA,
        confirmation_number_length=config_service.provided.CONFIRMATION_NUMBER_LENGTH,
        max_confirmation_attempts=config_service.provided.CONFIRMATION_NUMBER_MAX_ATTEMPTS,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
