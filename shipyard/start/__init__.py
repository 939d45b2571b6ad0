"""Container start orchestration.

Key components:
- StartOrchestrator: Sequential driver for a start set
- validate_links: Up-front id and link checks
- ReadinessPoller: Waits for startup patterns in container logs
- PortPublisher: Publishes port mappings as properties
- BuiltImageRegistry: Built-image alias lookup
"""

from shipyard.start.clock import Clock, SystemClock
from shipyard.start.errors import ErrorCollector, RunError, RunErrorKind
from shipyard.start.loader import load_start_file
from shipyard.start.orchestrator import RunResult, StartOrchestrator
from shipyard.start.poller import ReadinessPoller
from shipyard.start.ports import PortPublisher, port_property_key
from shipyard.start.registry import BuiltImageRegistry, parse_built_image
from shipyard.start.validator import validate_links

__all__ = [
    "StartOrchestrator",
    "RunResult",
    "validate_links",
    "ReadinessPoller",
    "PortPublisher",
    "port_property_key",
    "BuiltImageRegistry",
    "parse_built_image",
    "load_start_file",
    "ErrorCollector",
    "RunError",
    "RunErrorKind",
    "Clock",
    "SystemClock",
]
