"""Pre-flight validation of container links and ids."""

from collections import Counter
from typing import List, Sequence

import structlog

from shipyard.docker.config import StartConfiguration
from shipyard.start.errors import (
    RunError,
    duplicate_id_error,
    link_not_yet_started_error,
    unknown_link_target_error,
)

logger = structlog.get_logger(__name__)


def validate_links(configurations: Sequence[StartConfiguration]) -> List[RunError]:
    """
    Check a start set before anything is started.

    Every violation is reported, not just the first:
    - an id declared more than once
    - a link to an id that is not declared at all
    - a link to an id that is only declared at or after the linking container

    Args:
        configurations: Containers in declaration (= start) order

    Returns:
        Validation errors; an empty list means the set can be started
    """
    errors: List[RunError] = []

    ids = [config.container_id for config in configurations]
    counts = Counter(container_id for container_id in ids if container_id is not None)
    for container_id, count in counts.items():
        if count > 1:
            errors.append(duplicate_id_error(container_id, count))

    declared = set(ids)
    started_before = set()
    for position, config in enumerate(configurations, start=1):
        label = config.label(position)
        for link in config.links:
            if link.target_id not in declared:
                errors.append(unknown_link_target_error(label, link.target_id))
            elif link.target_id not in started_before:
                errors.append(link_not_yet_started_error(label, link.target_id))
        started_before.add(config.container_id)

    if errors:
        logger.warning(
            "start_set_invalid",
            error_count=len(errors),
            kinds=sorted({error.kind.value for error in errors}),
        )

    return errors
