"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Ollama → hosted API → rule-based, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from idea_analysis.protocols import AnalysisProvider

    # Type hints work with any implementation
    provider: AnalysisProvider = OllamaProvider.create()   # works
    provider: AnalysisProvider = RuleBasedProvider()       # also works
    ```
"""

from .analysis_provider import AnalysisProvider
from .metrics_sink import MetricsSink
from .result_cache import ResultCache
from .scoring_engine import ScoringEngine

__all__ = [
    "AnalysisProvider",
    "MetricsSink",
    "ResultCache",
    "ScoringEngine",
]
