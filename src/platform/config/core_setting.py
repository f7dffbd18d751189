from pathlib import Path
from typing import Annotated, List

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Hotel Reservation Service'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # ScyllaDB Configuration
    SCYLLA_CONTACT_POINTS: Annotated[List[str], NoDecode] = ['localhost']
    SCYLLA_PORT: int = 9042
    SCYLLA_KEYSPACE: str = 'reservation'
    SCYLLA_LOCAL_DC: str = 'datacenter1'  # Default ScyllaDB datacenter name
    SCYLLA_USERNAME: str = 'cassandra'  # Default username in developer mode
    SCYLLA_PASSWORD: SecretStr = SecretStr('cassandra')  # Default password in developer mode
    SCYLLA_CONNECT_TIMEOUT: int = 10  # Connection timeout (seconds)
    SCYLLA_CONTROL_TIMEOUT: int = 10  # Control connection timeout (seconds)
    SCYLLA_REQUEST_TIMEOUT: float = 10.0  # Request timeout (seconds)
    SCYLLA_REPLICATION_FACTOR: int = 1  # SimpleStrategy, 3 for production

    # Drops and recreates the keyspace on startup. Destroys every reservation.
    SCYLLA_DROP_SCHEMA: bool = False

    # Consistency level names from cassandra.ConsistencyLevel
    SCYLLA_READ_CONSISTENCY: str = 'LOCAL_ONE'
    SCYLLA_WRITE_CONSISTENCY: str = 'LOCAL_QUORUM'

    @field_validator('SCYLLA_CONTACT_POINTS', mode='before')
    @classmethod
    def assemble_scylla_contact_points(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return ['localhost']

    @field_validator('SCYLLA_READ_CONSISTENCY', 'SCYLLA_WRITE_CONSISTENCY', mode='after')
    @classmethod
    def normalize_consistency_level(cls, v: str) -> str:
        return v.strip().upper()

    # Confirmation numbers
    CONFIRMATION_NUMBER_LENGTH: int = 6
    CONFIRMATION_NUMBER_MAX_ATTEMPTS: int = 10


settings = Settings()  # type: ignore
