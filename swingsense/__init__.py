"""SwingSense real-time swing detection engine."""

from importlib.metadata import PackageNotFoundError, version

from .config import EngineConfig, PhysicalConstants, load_config
from .domain_models import SensorSample, SwingEvent
from .processing import SwingEngine

__all__ = [
    "EngineConfig",
    "PhysicalConstants",
    "SensorSample",
    "SwingEngine",
    "SwingEvent",
    "__version__",
    "load_config",
]

try:
    __version__: str = version("swingsense")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
