"""
ScyllaDB session handle

One long-lived Cluster/Session pair per repository. The driver is thread-safe and
pools connections per host (one per shard on ScyllaDB), so the handle is shared by
every request for the lifetime of the process.

Lifecycle:
- connect(): build the Cluster from a connection descriptor and open a session
  (idempotent, the first call wins)
- session: the open session, raises once the handle is closed
- shutdown(): release cluster resources exactly once, safe after a failed connect

Usage:
    handle = ScyllaSessionHandle(descriptor=ScyllaConnectionDescriptor.from_settings(settings))
    session = await anyio.to_thread.run_sync(handle.connect)
    ...
    await anyio.to_thread.run_sync(handle.shutdown)
"""

import threading
from typing import List, Optional

import attrs
from cassandra import ConsistencyLevel
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import EXEC_PROFILE_DEFAULT, Cluster, ExecutionProfile, Session
from cassandra.policies import (
    DCAwareRoundRobinPolicy,
    ExponentialReconnectionPolicy,
    TokenAwarePolicy,
)
from pydantic import SecretStr

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger


def consistency_level_from_name(name: str) -> int:
    """'LOCAL_QUORUM' -> ConsistencyLevel.LOCAL_QUORUM"""
    try:
        return ConsistencyLevel.name_to_value[name.upper()]
    except KeyError:
        raise ValueError(f'Unknown consistency level: {name}') from None


@attrs.frozen
class ScyllaConnectionDescriptor:
    contact_points: List[str] = attrs.field(converter=list)
    port: int
    local_dc: str
    keyspace: str
    username: str = 'cassandra'
    password: SecretStr = attrs.field(default=SecretStr('cassandra'), repr=False)
    connect_timeout: float = 10
    control_connection_timeout: float = 10
    request_timeout: float = 10.0
    replication_factor: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> 'ScyllaConnectionDescriptor':
        return cls(
            contact_points=settings.SCYLLA_CONTACT_POINTS,
            port=settings.SCYLLA_PORT,
            local_dc=settings.SCYLLA_LOCAL_DC,
            keyspace=settings.SCYLLA_KEYSPACE,
            username=settings.SCYLLA_USERNAME,
            password=settings.SCYLLA_PASSWORD,
            connect_timeout=settings.SCYLLA_CONNECT_TIMEOUT,
            control_connection_timeout=settings.SCYLLA_CONTROL_TIMEOUT,
            request_timeout=settings.SCYLLA_REQUEST_TIMEOUT,
            replication_factor=settings.SCYLLA_REPLICATION_FACTOR,
        )


def create_cluster(descriptor: ScyllaConnectionDescriptor) -> Cluster:
    """
    Create ScyllaDB cluster

    Configuration:
    - Token-aware over DC-aware round robin: requests go to a replica in the local DC
    - Authentication: username/password from the descriptor
    - Execution profile: default consistency and request timeout
      (prepared statements and batches override consistency per operation)
    """
    load_balancing_policy = TokenAwarePolicy(
        DCAwareRoundRobinPolicy(local_dc=descriptor.local_dc)
    )

    auth_provider = PlainTextAuthProvider(
        username=descriptor.username, password=descriptor.password.get_secret_value()
    )

    # load_balancing_policy must live in the profile, not in Cluster(), when using profiles
    default_profile = ExecutionProfile(
        load_balancing_policy=load_balancing_policy,
        consistency_level=ConsistencyLevel.LOCAL_QUORUM,
        request_timeout=descriptor.request_timeout,
    )

    return Cluster(
        contact_points=descriptor.contact_points,
        port=descriptor.port,
        auth_provider=auth_provider,
        protocol_version=4,  # CQL native protocol v4
        connect_timeout=descriptor.connect_timeout,
        control_connection_timeout=descriptor.control_connection_timeout,
        reconnection_policy=ExponentialReconnectionPolicy(base_delay=1, max_delay=30),
        execution_profiles={EXEC_PROFILE_DEFAULT: default_profile},
    )


class ScyllaSessionHandle:
    def __init__(self, *, descriptor: ScyllaConnectionDescriptor) -> None:
        self.descriptor = descriptor
        self._cluster: Optional[Cluster] = None
        self._session: Optional[Session] = None
        self._closed = False
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._closed

    @property
    def session(self) -> Session:
        if self._closed:
            raise RuntimeError('ScyllaDB session handle has been shut down')
        if self._session is None:
            raise RuntimeError('ScyllaDB session handle is not connected')
        return self._session

    def connect(self) -> Session:
        """Blocking. Opens a session without a keyspace, the schema bootstrap selects it."""
        with self._lock:
            if self._closed:
                raise RuntimeError('ScyllaDB session handle has been shut down')
            if self._session is not None:
                return self._session

            Logger.base.info(
                f'🔌 [ScyllaDB] Connecting to {self.descriptor.contact_points}'
                f':{self.descriptor.port} (dc={self.descriptor.local_dc})'
            )
            self._cluster = create_cluster(self.descriptor)
            self._session = self._cluster.connect()
            Logger.base.info('✅ [ScyllaDB] Session created')
            return self._session

    def shutdown(self) -> None:
        """Blocking. Releases the cluster exactly once, also after a failed connect()."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            cluster, self._cluster, self._session = self._cluster, None, None

        if cluster is not None:
            cluster.shutdown()
            Logger.base.info('🔌 [ScyllaDB] Session closed')
