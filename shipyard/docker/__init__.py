"""Container engine access for Shipyard.

Key components:
- StartConfiguration: Declared container, built up with immutable helpers
- StartRequest: Resolved request handed to a provider
- Provider: Engine capabilities the orchestrator depends on
- DockerCliProvider: Provider backed by the docker command line
"""

from shipyard.docker.config import (
    DEFAULT_STARTUP_TIMEOUT_SECONDS,
    ExposedPort,
    Link,
    StartConfiguration,
    StartOutcome,
    StartRequest,
)
from shipyard.docker.exceptions import (
    ContainerNotFoundException,
    ContainerRemoveException,
    ContainerStartupException,
    ContainerStopException,
    DockerException,
    DockerImageException,
)
from shipyard.docker.provider import DockerCliProvider, Provider

__all__ = [
    # Providers
    "Provider",
    "DockerCliProvider",
    # Configuration models
    "DEFAULT_STARTUP_TIMEOUT_SECONDS",
    "StartConfiguration",
    "StartRequest",
    "StartOutcome",
    "Link",
    "ExposedPort",
    # Exceptions
    "DockerException",
    "ContainerStartupException",
    "ContainerStopException",
    "ContainerRemoveException",
    "ContainerNotFoundException",
    "DockerImageException",
]
