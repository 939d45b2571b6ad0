"""Sequential start of a declared container set.

The orchestrator drives one run:
- Validates ids and links up front and refuses to start anything on error
- Starts containers one by one in declaration order
- Publishes port mappings and waits for startup patterns
- Collects failures instead of aborting, so every container gets its chance
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from shipyard.docker.config import StartConfiguration, StartOutcome, StartRequest
from shipyard.docker.exceptions import DockerException
from shipyard.docker.provider import Provider
from shipyard.start.clock import Clock, SystemClock
from shipyard.start.errors import (
    ErrorCollector,
    RunError,
    port_lookup_failed_error,
    start_failed_error,
    stop_failed_error,
)
from shipyard.start.poller import DEFAULT_POLL_INTERVAL_SECONDS, ReadinessPoller
from shipyard.start.ports import PortPublisher
from shipyard.start.registry import BuiltImageRegistry
from shipyard.start.validator import validate_links

logger = structlog.get_logger(__name__)


@dataclass
class RunResult:
    """Outcome of a run: what started, what failed and the published properties."""

    errors: Tuple[RunError, ...] = ()
    outcomes: Tuple[StartOutcome, ...] = ()
    properties: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors


class StartOrchestrator:
    """
    Starts a list of containers against a single provider.

    Usage:
        orchestrator = StartOrchestrator(DockerCliProvider())
        result = orchestrator.run([
            StartConfiguration(image="postgres:16", id="db").waiting_for("ready"),
            StartConfiguration(image="app", id="app").with_link("db", "database"),
        ])
        if not result.success:
            for error in result.errors:
                print(error.message)
    """

    def __init__(
        self,
        provider: Provider,
        registry: Optional[BuiltImageRegistry] = None,
        clock: Optional[Clock] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        property_prefix: str = "",
    ):
        """
        Initialize the orchestrator.

        Args:
            provider: Container engine to start containers on
            registry: Images built earlier in the build, looked up by alias
            clock: Time source for startup waits (defaults to real time)
            poll_interval: Seconds between log polls
            property_prefix: Prefix for published property keys
        """
        self.provider = provider
        self.registry = registry or BuiltImageRegistry()
        self.clock = clock or SystemClock()
        self.poller = ReadinessPoller(provider, clock=self.clock, interval=poll_interval)
        self.property_prefix = property_prefix

    def run(
        self, configurations: Sequence[StartConfiguration], skip: bool = False
    ) -> RunResult:
        """
        Start every configuration in order.

        Args:
            configurations: Containers in start order
            skip: Do nothing and report success

        Returns:
            RunResult with all recorded errors, started containers and properties
        """
        if skip:
            logger.info("container_start_skipped", count=len(configurations))
            return RunResult()

        validation_errors = validate_links(configurations)
        if validation_errors:
            return RunResult(errors=tuple(validation_errors))

        collector = ErrorCollector()
        properties: Dict[str, str] = {}
        publisher = PortPublisher(self.provider, properties, prefix=self.property_prefix)
        outcomes: List[StartOutcome] = []
        runtime_ids: Dict[str, str] = {}

        logger.info("starting_containers", count=len(configurations))

        for position, config in enumerate(configurations, start=1):
            outcome = self._start_one(config, position, runtime_ids, publisher, collector)
            if outcome is not None:
                outcomes.append(outcome)

        logger.info(
            "containers_start_finished",
            started=len(outcomes),
            failed=len(collector),
        )
        return RunResult(
            errors=collector.errors,
            outcomes=tuple(outcomes),
            properties=properties,
        )

    def _start_one(
        self,
        config: StartConfiguration,
        position: int,
        runtime_ids: Dict[str, str],
        publisher: PortPublisher,
        collector: ErrorCollector,
    ) -> Optional[StartOutcome]:
        config_id = config.label(position)
        log = logger.bind(config_id=config_id)

        if not config.image:
            collector.add(start_failed_error(config_id, "no image declared"))
            return None

        request = self.build_request(config, runtime_ids)
        log.info("starting_container", image=request.image)

        try:
            runtime_id = self.provider.start_container(request)
        except DockerException as e:
            log.error("container_start_failed", error=str(e))
            collector.add(start_failed_error(config_id, str(e)))
            return None
        started_at = self.clock.monotonic()

        runtime_ids[config_id] = runtime_id
        log.info("container_started", runtime_id=runtime_id)

        ports = ()
        try:
            ports = tuple(publisher.publish(config_id, runtime_id))
        except DockerException as e:
            log.error("port_lookup_failed", error=str(e))
            collector.add(port_lookup_failed_error(config_id, str(e)))

        if config.wait_for_startup:
            try:
                error = self.poller.wait(
                    config_id,
                    runtime_id,
                    config.wait_for_startup,
                    config.effective_startup_timeout,
                    started_at,
                )
            except DockerException as e:
                log.error("startup_wait_failed", error=str(e))
                error = start_failed_error(config_id, str(e))
            if error is not None:
                collector.add(error)

        return StartOutcome(config_id=config_id, runtime_id=runtime_id, exposed_ports=ports)

    def build_request(
        self, config: StartConfiguration, runtime_ids: Dict[str, str]
    ) -> StartRequest:
        """
        Turn a declared configuration into a provider request.

        The image is resolved through the built-image registry. Links point at
        the runtime id of the started target; a target that failed to start is
        passed through by its declared id so the engine can reject the link.
        """
        links = tuple(
            (runtime_ids.get(link.target_id, link.target_id), link.alias)
            for link in config.links
        )
        return StartRequest(
            image=self.registry.resolve(config.image),
            links=links,
            command=config.command,
            hostname=config.hostname,
            user=config.user,
            memory=config.memory,
            environment=config.environment,
        )

    def stop(self, outcomes: Sequence[StartOutcome]) -> List[RunError]:
        """
        Stop and remove started containers, last started first.

        A failure is logged and recorded and the remaining containers are
        still cleaned up.

        Returns:
            Cleanup errors, empty when everything was removed
        """
        collector = ErrorCollector()
        for outcome in reversed(outcomes):
            log = logger.bind(config_id=outcome.config_id)
            try:
                self.provider.stop_container(outcome.runtime_id)
                self.provider.remove_container(outcome.runtime_id)
                log.info("container_removed", runtime_id=outcome.runtime_id)
            except DockerException as e:
                log.error("container_cleanup_failed", error=str(e))
                collector.add(
                    stop_failed_error(outcome.config_id, str(e), runtime_id=outcome.runtime_id)
                )
        return list(collector.errors)
