"""Run errors recorded while starting containers."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class RunErrorKind(str, Enum):
    """Kind of a recorded run error."""

    # Validation: the whole run is aborted before any container starts
    DUPLICATE_ID = "duplicate_id"
    UNKNOWN_LINK_TARGET = "unknown_link_target"
    LINK_NOT_YET_STARTED = "link_not_yet_started"

    # Recorded per container, the run carries on
    START_FAILED = "start_failed"
    STARTUP_TIMEOUT = "startup_timeout"
    PORT_LOOKUP_FAILED = "port_lookup_failed"
    STOP_FAILED = "stop_failed"

    @property
    def is_validation(self) -> bool:
        return self in VALIDATION_KINDS


VALIDATION_KINDS = frozenset(
    {
        RunErrorKind.DUPLICATE_ID,
        RunErrorKind.UNKNOWN_LINK_TARGET,
        RunErrorKind.LINK_NOT_YET_STARTED,
    }
)


@dataclass(frozen=True)
class RunError:
    """A failure recorded during a run.

    ``config_id`` is None for errors that concern the whole run.
    ``runtime_id`` names the engine container a cleanup error is about.
    """

    kind: RunErrorKind
    message: str
    config_id: Optional[str] = None
    runtime_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "config_id": self.config_id,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.runtime_id is not None:
            data["runtime_id"] = self.runtime_id
        return data


def duplicate_id_error(config_id: str, count: int) -> RunError:
    return RunError(
        kind=RunErrorKind.DUPLICATE_ID,
        message=f"Container id '{config_id}' is declared {count} times; ids must be unique",
        config_id=config_id,
    )


def unknown_link_target_error(config_id: str, target_id: str) -> RunError:
    return RunError(
        kind=RunErrorKind.UNKNOWN_LINK_TARGET,
        message=f"Container '{config_id}' links to '{target_id}', which is not declared",
        config_id=config_id,
    )


def link_not_yet_started_error(config_id: str, target_id: str) -> RunError:
    return RunError(
        kind=RunErrorKind.LINK_NOT_YET_STARTED,
        message=(
            f"Container '{config_id}' links to '{target_id}', which is declared "
            f"but not before it; move '{target_id}' above '{config_id}'"
        ),
        config_id=config_id,
    )


def start_failed_error(config_id: str, reason: str) -> RunError:
    return RunError(
        kind=RunErrorKind.START_FAILED,
        message=f"Failed to start container '{config_id}': {reason}",
        config_id=config_id,
    )


def startup_timeout_error(config_id: str, pattern: str, timeout: float) -> RunError:
    return RunError(
        kind=RunErrorKind.STARTUP_TIMEOUT,
        message=(
            f"Container '{config_id}' did not log '{pattern}' within {timeout:g} seconds"
        ),
        config_id=config_id,
    )


def port_lookup_failed_error(config_id: str, reason: str) -> RunError:
    return RunError(
        kind=RunErrorKind.PORT_LOOKUP_FAILED,
        message=f"Cannot read exposed ports of container '{config_id}': {reason}",
        config_id=config_id,
    )


def stop_failed_error(config_id: str, reason: str, runtime_id: Optional[str] = None) -> RunError:
    return RunError(
        kind=RunErrorKind.STOP_FAILED,
        message=f"Failed to clean up container '{config_id}': {reason}",
        config_id=config_id,
        runtime_id=runtime_id,
    )


class ErrorCollector:
    """Append-only, ordered record of run errors."""

    def __init__(self) -> None:
        self._errors: List[RunError] = []

    def add(self, error: RunError) -> None:
        self._errors.append(error)

    @property
    def errors(self) -> tuple:
        return tuple(self._errors)

    @property
    def success(self) -> bool:
        return not self._errors

    def __len__(self) -> int:
        return len(self._errors)

