"""Publish container port mappings as build properties."""

from typing import List, MutableMapping

import structlog

from shipyard.docker.config import ExposedPort
from shipyard.docker.provider import Provider

logger = structlog.get_logger(__name__)


def port_property_key(config_id: str, port_spec: str, field: str, prefix: str = "") -> str:
    """Build ``<prefix>containers.<id>.ports.<spec>.<field>``."""
    return f"{prefix}containers.{config_id}.ports.{port_spec}.{field}"


class PortPublisher:
    """Writes host address and port of every exposed port into a property sink."""

    def __init__(
        self,
        provider: Provider,
        sink: MutableMapping[str, str],
        prefix: str = "",
    ):
        self.provider = provider
        self.sink = sink
        self.prefix = prefix

    def publish(self, config_id: str, runtime_id: str) -> List[ExposedPort]:
        """
        Look up the exposed ports of a started container and publish them.

        Only the first port reported for a spec is published.

        Raises:
            DockerException: If the provider cannot inspect the container
        """
        ports: List[ExposedPort] = []
        for port in self.provider.get_exposed_ports(runtime_id):
            if all(port.spec != seen.spec for seen in ports):
                ports.append(port)

        for port in ports:
            self.sink[port_property_key(config_id, port.spec, "host", self.prefix)] = (
                port.host_address
            )
            self.sink[port_property_key(config_id, port.spec, "port", self.prefix)] = str(
                port.host_port
            )

        if ports:
            logger.info(
                "ports_published",
                config_id=config_id,
                ports={port.spec: f"{port.host_address}:{port.host_port}" for port in ports},
            )
        return ports
