"""Shared fixtures: an in-memory provider and a simulated clock."""

from typing import Callable, Dict, List, Optional, Union

import pytest

import shipyard.config
from shipyard.docker.config import ExposedPort, StartRequest
from shipyard.docker.exceptions import ContainerStartupException


class FakeClock:
    """Clock whose time only moves when something sleeps."""

    def __init__(self, now: float = 1000.0):
        self.now = now
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeProvider:
    """
    Provider double that records every call.

    - ``fail_images``: images whose start raises ContainerStartupException
    - ``logs``: runtime id -> log text, or a callable returning it
    - ``ports``: runtime id -> exposed ports
    """

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.calls: List[tuple] = []
        self.start_requests: List[StartRequest] = []
        self.fail_images: set = set()
        self.logs: Dict[str, Union[str, None, Callable[[], Optional[str]]]] = {}
        self.ports: Dict[str, List[ExposedPort]] = {}
        self.port_errors: Dict[str, Exception] = {}
        self.stop_errors: Dict[str, Exception] = {}
        self._next_id = 0

    def start_container(self, request: StartRequest) -> str:
        self.calls.append(("start_container", request.image))
        self.start_requests.append(request)
        if request.image in self.fail_images:
            raise ContainerStartupException(f"No such image: {request.image}")
        self._next_id += 1
        return f"runtime-{self._next_id}"

    def get_logs(self, runtime_id: str) -> Optional[str]:
        self.calls.append(("get_logs", runtime_id))
        value = self.logs.get(runtime_id)
        return value() if callable(value) else value

    def get_exposed_ports(self, runtime_id: str) -> List[ExposedPort]:
        self.calls.append(("get_exposed_ports", runtime_id))
        if runtime_id in self.port_errors:
            raise self.port_errors[runtime_id]
        return self.ports.get(runtime_id, [])

    def stop_container(self, runtime_id: str) -> None:
        self.calls.append(("stop_container", runtime_id))
        if runtime_id in self.stop_errors:
            raise self.stop_errors[runtime_id]

    def remove_container(self, runtime_id: str) -> None:
        self.calls.append(("remove_container", runtime_id))

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider(clock):
    return FakeProvider(clock)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from the user's ~/.shipyard/config.yaml."""
    monkeypatch.setattr(
        shipyard.config, "load_yaml_config", lambda config_path=None: {}
    )
    shipyard.config.reset_settings()
    yield
    shipyard.config.reset_settings()
