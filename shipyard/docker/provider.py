"""Container engine providers.

The orchestrator only needs a handful of engine operations, described by the
``Provider`` protocol. ``DockerCliProvider`` implements them by shelling out
to the ``docker`` command line:
- Container start with all exposed ports published
- Log access
- Port mapping inspection
- Stop and removal
"""

import json
import subprocess
from typing import List, Optional, Protocol

import structlog

from shipyard.docker.config import ExposedPort, StartRequest
from shipyard.docker.exceptions import (
    ContainerNotFoundException,
    ContainerRemoveException,
    ContainerStartupException,
    ContainerStopException,
    DockerException,
    DockerImageException,
)

logger = structlog.get_logger(__name__)


class Provider(Protocol):
    """Capabilities the start orchestration needs from a container engine."""

    def start_container(self, request: StartRequest) -> str:
        """Start a container and return its runtime id."""
        ...

    def get_logs(self, runtime_id: str) -> Optional[str]:
        """Return the accumulated log text, or None when there is none yet."""
        ...

    def get_exposed_ports(self, runtime_id: str) -> List[ExposedPort]: ...

    def stop_container(self, runtime_id: str) -> None: ...

    def remove_container(self, runtime_id: str) -> None: ...


def parse_port_bindings(inspection: dict) -> List[ExposedPort]:
    """
    Extract exposed ports from ``docker inspect`` output.

    Docker reports ports as ``{"8080/tcp": [{"HostIp": "0.0.0.0", "HostPort": "1337"}]}``.
    The port key is turned around into ``protocol/port`` form. Each port
    yields at most one ExposedPort: dual-stack engines list an IPv4 and an
    IPv6 binding for the same host port, and the IPv4 one wins. Unbound
    ports (value ``None``) and bindings without a numeric ``HostPort`` are
    skipped.

    Args:
        inspection: One element of the ``docker inspect`` JSON array

    Returns:
        Exposed ports in the order docker reports them
    """
    ports = (inspection.get("NetworkSettings") or {}).get("Ports") or {}

    exposed = []
    for key, bindings in ports.items():
        usable = [b for b in bindings or [] if str(b.get("HostPort") or "").isdigit()]
        if not usable:
            continue
        binding = next((b for b in usable if ":" not in (b.get("HostIp") or "")), usable[0])

        port, _, protocol = key.partition("/")
        exposed.append(
            ExposedPort(
                spec=f"{protocol or 'tcp'}/{port}",
                host_port=int(binding["HostPort"]),
                host_address=binding.get("HostIp") or "0.0.0.0",
            )
        )
    return exposed


class DockerCliProvider:
    """
    Provider backed by the docker command line.

    Every call is a single blocking ``subprocess.run`` bounded by
    ``command_timeout``. Non-zero exit codes are raised as DockerException
    subclasses so callers can record them.

    Usage:
        provider = DockerCliProvider()
        runtime_id = provider.start_container(StartRequest(image="redis:7"))
        ports = provider.get_exposed_ports(runtime_id)
        provider.stop_container(runtime_id)
        provider.remove_container(runtime_id)
    """

    def __init__(self, docker_binary: str = "docker", command_timeout: int = 60):
        """
        Initialize the provider.

        Args:
            docker_binary: docker executable name or path
            command_timeout: Seconds before a docker invocation is abandoned
        """
        self.docker_binary = docker_binary
        self.command_timeout = command_timeout

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.command_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise DockerException(
                f"docker command timed out after {self.command_timeout}s",
                command=" ".join(args),
            ) from e
        except OSError as e:
            raise DockerException(
                f"Cannot run {self.docker_binary}: {e}", command=" ".join(args)
            ) from e

    def start_container(self, request: StartRequest) -> str:
        """
        Start a detached container with all exposed ports published.

        Returns:
            The container ID

        Raises:
            DockerImageException: If the image cannot be found or pulled
            ContainerStartupException: If the engine rejects the container
        """
        command = request.to_docker_run_args(self.docker_binary)

        logger.debug("docker_run_command", command=" ".join(command))

        result = self._run(command)
        if result.returncode != 0:
            error_msg = result.stderr.strip() or "Unknown error"
            if "Unable to find image" in error_msg or "pull access denied" in error_msg:
                raise DockerImageException(
                    f"Image not available: {error_msg}", image=request.image
                )
            raise ContainerStartupException(
                f"Failed to start container: {error_msg}", image=request.image
            )

        # docker may print pull progress before the id; the id is the last line
        lines = result.stdout.strip().splitlines()
        if not lines:
            raise ContainerStartupException(
                "docker run printed no container id", image=request.image
            )
        container_id = lines[-1].strip()

        logger.info(
            "docker_container_started",
            container_id=container_id,
            image=request.image,
        )
        return container_id

    def get_logs(self, runtime_id: str) -> Optional[str]:
        result = self._run([self.docker_binary, "logs", runtime_id])
        if result.returncode != 0:
            raise ContainerNotFoundException(
                f"Cannot read logs: {result.stderr.strip()}", runtime_id=runtime_id
            )
        logs = result.stdout
        if result.stderr:
            logs += result.stderr
        return logs or None

    def get_exposed_ports(self, runtime_id: str) -> List[ExposedPort]:
        result = self._run([self.docker_binary, "inspect", runtime_id])
        if result.returncode != 0:
            raise ContainerNotFoundException(
                f"Cannot inspect container: {result.stderr.strip()}",
                runtime_id=runtime_id,
            )

        try:
            inspections = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise DockerException(
                f"Unreadable inspect output: {e}", runtime_id=runtime_id
            ) from e

        if not inspections:
            raise ContainerNotFoundException(
                "Container not found", runtime_id=runtime_id
            )
        return parse_port_bindings(inspections[0])

    def stop_container(self, runtime_id: str) -> None:
        logger.info("stopping_docker_container", container_id=runtime_id)

        result = self._run([self.docker_binary, "stop", runtime_id])
        if result.returncode != 0:
            raise ContainerStopException(
                f"Failed to stop container: {result.stderr.strip()}",
                runtime_id=runtime_id,
            )

    def remove_container(self, runtime_id: str) -> None:
        logger.info("removing_docker_container", container_id=runtime_id)

        result = self._run([self.docker_binary, "rm", "-v", runtime_id])
        if result.returncode != 0:
            raise ContainerRemoveException(
                f"Failed to remove container: {result.stderr.strip()}",
                runtime_id=runtime_id,
            )
