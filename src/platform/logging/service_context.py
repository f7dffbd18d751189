"""
Service context for log lines.

Every log line carries `<service>@<deploy_env>:<instance>` so lines from several
replicas of the reservation service can be told apart once aggregated.
"""

import os
from functools import lru_cache
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'hotel-reservation')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container orchestrators set HOSTNAME to the pod / task name
    instance = os.getenv('HOSTNAME') or socket.gethostname()
    if deploy_env == 'local_dev':
        instance = str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance[:12]}'
