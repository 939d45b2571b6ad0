"""Wait for a container to log its startup pattern."""

import re
from typing import Callable, Optional

import structlog

from shipyard.docker.provider import Provider
from shipyard.start.clock import Clock, SystemClock
from shipyard.start.errors import RunError, startup_timeout_error

logger = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 0.5


def compile_matcher(pattern: str) -> Callable[[str], bool]:
    """
    Build a matcher for a startup pattern.

    The literal text always matches by containment, so ``[INFO] ready``
    finds itself. Patterns that compile are also searched as regular
    expressions anywhere in the log text.
    """
    try:
        regex = re.compile(pattern)
    except re.error:
        logger.debug("startup_pattern_literal", pattern=pattern)
        return lambda text: pattern in text
    return lambda text: pattern in text or regex.search(text) is not None


class ReadinessPoller:
    """
    Polls container logs until a startup pattern shows up or time runs out.

    Usage:
        poller = ReadinessPoller(provider)
        started_at = poller.clock.monotonic()
        error = poller.wait("db", runtime_id, "ready to accept", 30, started_at)
    """

    def __init__(
        self,
        provider: Provider,
        clock: Optional[Clock] = None,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ):
        """
        Initialize the poller.

        Args:
            provider: Engine to read logs from
            clock: Time source (defaults to real time)
            interval: Seconds to pause between unsuccessful polls
        """
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self.provider = provider
        self.clock = clock or SystemClock()
        self.interval = interval

    def wait(
        self,
        config_id: str,
        runtime_id: str,
        pattern: str,
        timeout: float,
        started_at: float,
    ) -> Optional[RunError]:
        """
        Block until the pattern is logged or the timeout passes.

        Args:
            config_id: Declared id, used in the error
            runtime_id: Engine id to read logs from
            pattern: Startup pattern
            timeout: Seconds allowed since ``started_at``
            started_at: Clock reading taken right after the container started

        Returns:
            None when the pattern was seen, a startup timeout error otherwise
        """
        matches = compile_matcher(pattern)
        deadline = started_at + timeout
        polls = 0

        logger.debug(
            "waiting_for_startup",
            config_id=config_id,
            pattern=pattern,
            timeout=timeout,
        )

        while True:
            polls += 1
            logs = self.provider.get_logs(runtime_id)
            if logs and matches(logs):
                logger.info(
                    "container_ready",
                    config_id=config_id,
                    polls=polls,
                    elapsed=f"{self.clock.monotonic() - started_at:.2f}s",
                )
                return None

            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                break
            self.clock.sleep(min(self.interval, remaining))

        logger.warning(
            "startup_timeout",
            config_id=config_id,
            pattern=pattern,
            timeout=timeout,
            polls=polls,
        )
        return startup_timeout_error(config_id, pattern, timeout)
