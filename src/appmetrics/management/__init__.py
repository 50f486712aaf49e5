"""Management bean namespace."""

from .server import (
    ALLOCATOR_BEAN,
    RUNTIME_BEAN,
    InstanceAlreadyExistsError,
    InstanceNotFoundError,
    MalformedObjectNameError,
    ManagedBean,
    ManagementServer,
    ObjectName,
    get_platform_server,
    register_platform_beans,
)

__all__ = [
    "ALLOCATOR_BEAN",
    "RUNTIME_BEAN",
    "InstanceAlreadyExistsError",
    "InstanceNotFoundError",
    "MalformedObjectNameError",
    "ManagedBean",
    "ManagementServer",
    "ObjectName",
    "get_platform_server",
    "register_platform_beans",
]
