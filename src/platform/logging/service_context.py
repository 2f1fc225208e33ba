"""
Process identity stamped on every log line.

API workers and the expiry reaper run the same image; the context tells their
lines apart: `ticket-market@prod:api-7f9c2b-4821`.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'ticket-market')
    deploy_env = os.getenv('DEPLOY_ENV', 'local')
    # Container hostnames are pod/task ids; locally this is the machine name
    host = os.getenv('HOSTNAME') or socket.gethostname()
    return f'{service_name}@{deploy_env}:{host[:12]}-{os.getpid()}'
