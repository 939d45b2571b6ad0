"""Docker-specific exceptions for Shipyard."""

from shipyard.exceptions import ShipyardError


class DockerException(ShipyardError):
    """Base exception for Docker operations."""

    pass


class ContainerStartupException(DockerException):
    """Raised when the engine refuses to create or start a container."""

    pass


class ContainerNotFoundException(DockerException):
    """Raised when container is not found."""

    pass


class ContainerStopException(DockerException):
    """Raised when container fails to stop gracefully."""

    pass


class ContainerRemoveException(DockerException):
    """Raised when a stopped container cannot be removed."""

    pass


class DockerImageException(DockerException):
    """Raised when Docker image is invalid or unavailable."""

    pass
