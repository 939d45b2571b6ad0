"""Persist started containers between ``start`` and ``stop``."""

import json
from pathlib import Path
from typing import List, Sequence

from shipyard.docker.config import ExposedPort, StartOutcome
from shipyard.exceptions import StateFileError


def outcome_to_dict(outcome: StartOutcome) -> dict:
    return {
        "config_id": outcome.config_id,
        "runtime_id": outcome.runtime_id,
        "exposed_ports": [
            {
                "spec": port.spec,
                "host_port": port.host_port,
                "host_address": port.host_address,
            }
            for port in outcome.exposed_ports
        ],
    }


def outcome_from_dict(data: dict) -> StartOutcome:
    return StartOutcome(
        config_id=data["config_id"],
        runtime_id=data["runtime_id"],
        exposed_ports=tuple(ExposedPort(**port) for port in data.get("exposed_ports", [])),
    )


def save_state(path: Path, outcomes: Sequence[StartOutcome]) -> None:
    """Write started containers to ``path``, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps({"containers": [outcome_to_dict(o) for o in outcomes]}, indent=2)
        )
    except OSError as e:
        raise StateFileError(str(path), str(e)) from e


def load_state(path: Path) -> List[StartOutcome]:
    """Read started containers; a missing file means nothing was started."""
    if not path.exists():
        return []

    try:
        data = json.loads(path.read_text())
        return [outcome_from_dict(item) for item in data.get("containers", [])]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise StateFileError(str(path), str(e)) from e


def clear_state(path: Path) -> None:
    path.unlink(missing_ok=True)
