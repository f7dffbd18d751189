#!/usr/bin/env python3
"""
ScyllaDB Reset Script

Steps:
1. Drop & Recreate Keyspace - removes every reservation row
2. Recreate the address type and the reservation tables

Notes:
- Destructive: only run against local/test clusters
- `--truncate` keeps the schema and only empties the tables

Usage:
    python -m script.reset_scylladb
    python -m script.reset_scylladb --truncate
"""

import argparse

from src.platform.config.core_setting import settings
from src.platform.database.scylla_setting import ScyllaConnectionDescriptor, ScyllaSessionHandle
from src.service.hotel_reservation.driven_adapter.repo.reservation_schema_manager import (
    ReservationSchemaManager,
)
from src.service.hotel_reservation.driven_adapter.repo.reservation_table_schema import (
    ReservationSchema,
)


def reset_scylladb_keyspace(*, truncate_only: bool = False) -> None:
    descriptor = ScyllaConnectionDescriptor.from_settings(settings)
    schema = ReservationSchema(
        keyspace=descriptor.keyspace, replication_factor=descriptor.replication_factor
    )
    handle = ScyllaSessionHandle(descriptor=descriptor)

    print(f'📊 Connecting to ScyllaDB: {descriptor.contact_points}')
    try:
        manager = ReservationSchemaManager(session=handle.connect(), schema=schema)

        if truncate_only:
            print(f'🧹 Truncating tables in keyspace {schema.keyspace}...')
            manager.truncate_tables()
        else:
            print(f'🗑️  Dropping and recreating keyspace {schema.keyspace}...')
            manager.bootstrap(drop_keyspace=True)

        print(f'   ✅ {len(schema.tables)} tables ready')
    finally:
        handle.shutdown()


def main() -> None:
    parser = argparse.ArgumentParser(description='Reset the reservation keyspace')
    parser.add_argument(
        '--truncate', action='store_true', help='empty the tables instead of dropping the keyspace'
    )
    args = parser.parse_args()

    print('🔄 Starting ScyllaDB reset...')
    print('=' * 50)

    try:
        reset_scylladb_keyspace(truncate_only=args.truncate)
    except Exception as e:
        print(f'❌ Reset failed: {e}')
        raise SystemExit(1) from e

    print('=' * 50)
    print('✅ ScyllaDB reset completed!')


if __name__ == '__main__':
    main()
