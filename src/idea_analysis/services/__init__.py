"""Business logic services.

Services depend on PROTOCOLS, not concrete backends, so any provider
(or a fake in tests) can be plugged in.
"""

from .cached_provider import CachedProvider
from .fallback_chain import FallbackChain
from .provider_manager import HealthStatus, ProviderManager
from .quality_tracker import QualityTracker
from .response_processor import ResponseProcessor
from .telemetry import LLMTelemetry, MetricsCollector, get_metrics_collector
from .validator import ProcessedResult, ScoreValidationError, ScoreValidator

__all__ = [
    "CachedProvider",
    "FallbackChain",
    "HealthStatus",
    "LLMTelemetry",
    "MetricsCollector",
    "ProcessedResult",
    "ProviderManager",
    "QualityTracker",
    "ResponseProcessor",
    "ScoreValidationError",
    "ScoreValidator",
    "get_metrics_collector",
]
