"""Container start configuration models."""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

DEFAULT_STARTUP_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class Link:
    """Dependency on a container declared earlier in the same start set."""

    target_id: str
    alias: str


@dataclass(frozen=True)
class ExposedPort:
    """Port published by a running container."""

    spec: str  # protocol/port, e.g. "tcp/8080"
    host_port: int
    host_address: str


@dataclass(frozen=True)
class StartConfiguration:
    """Declared configuration of one container to start.

    Instances are immutable. The ``with_*`` helpers return a modified copy,
    so a base configuration can be shared between several derived ones.
    """

    image: Optional[str] = None
    id: Optional[str] = None
    links: Tuple[Link, ...] = ()
    wait_for_startup: Optional[str] = None
    startup_timeout: Optional[int] = None

    # Optional engine fields, omitted from the request when None
    command: Optional[Tuple[str, ...]] = None
    hostname: Optional[str] = None
    user: Optional[str] = None
    memory: Optional[int] = None
    environment: Optional[Dict[str, str]] = field(default=None, hash=False)

    @property
    def container_id(self) -> Optional[str]:
        """Id used for links and properties; defaults to the image."""
        return self.id if self.id is not None else self.image

    def label(self, position: int) -> str:
        """Name for messages: the container id, or ``<unnamed #position>``."""
        container_id = self.container_id
        return container_id if container_id is not None else f"<unnamed #{position}>"

    @property
    def effective_startup_timeout(self) -> int:
        """Startup timeout in seconds, falling back to the default when unset or zero."""
        if not self.startup_timeout or self.startup_timeout < 1:
            return DEFAULT_STARTUP_TIMEOUT_SECONDS
        return self.startup_timeout

    def from_image(self, image: str) -> "StartConfiguration":
        return replace(self, image=image)

    def with_id(self, container_id: str) -> "StartConfiguration":
        return replace(self, id=container_id)

    def with_links(self, *links: Link) -> "StartConfiguration":
        return replace(self, links=self.links + tuple(links))

    def with_link(self, target_id: str, alias: str) -> "StartConfiguration":
        return self.with_links(Link(target_id=target_id, alias=alias))

    def waiting_for(self, pattern: str) -> "StartConfiguration":
        return replace(self, wait_for_startup=pattern)

    def with_startup_timeout(self, seconds: int) -> "StartConfiguration":
        return replace(self, startup_timeout=seconds)

    def with_command(self, *command: str) -> "StartConfiguration":
        return replace(self, command=tuple(command))

    def with_env(self, key: str, value: str) -> "StartConfiguration":
        environment = dict(self.environment or {})
        environment[key] = value
        return replace(self, environment=environment)


@dataclass(frozen=True)
class StartRequest:
    """What the provider is asked to start.

    Built by the orchestrator from a StartConfiguration after the image has
    been resolved and links have been mapped to engine references.
    """

    image: str
    links: Tuple[Tuple[str, str], ...] = ()  # (engine reference, alias)
    command: Optional[Tuple[str, ...]] = None
    hostname: Optional[str] = None
    user: Optional[str] = None
    memory: Optional[int] = None
    environment: Optional[Dict[str, str]] = field(default=None, hash=False)

    def to_docker_run_args(self, docker_binary: str = "docker") -> List[str]:
        """Convert the request to docker run command arguments.

        Returns:
            List of command-line arguments for docker run
        """
        args = [docker_binary, "run", "--detach", "--publish-all"]

        if self.hostname:
            args.extend([f"--hostname={self.hostname}"])
        if self.user:
            args.extend([f"--user={self.user}"])
        if self.memory:
            args.extend([f"--memory={self.memory}"])

        for key, value in (self.environment or {}).items():
            args.extend(["-e", f"{key}={value}"])

        for reference, alias in self.links:
            args.extend(["--link", f"{reference}:{alias}"])

        args.append(self.image)

        if self.command:
            args.extend(self.command)

        return args


@dataclass(frozen=True)
class StartOutcome:
    """A container that was started during a run."""

    config_id: str
    runtime_id: str
    exposed_ports: Tuple[ExposedPort, ...] = ()
