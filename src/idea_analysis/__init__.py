"""Idea Analysis - resilient idea scoring over local, hosted and rule-based backends.

This package provides a layered architecture for idea analysis:

Layers:
    - protocols: Interface contracts (AnalysisProvider, ResultCache, MetricsSink, ScoringEngine)
    - repositories: Backend implementations (Ollama, OpenAI, Claude, rule-based)
    - services: Business logic (fallback chain, caching, processing, quality, telemetry)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from idea_analysis import AnalysisRequest, FallbackChain, GoalContext

    chain = FallbackChain.create_default()
    result = chain.analyze(AnalysisRequest(idea_text="...", context=GoalContext(goals=("...",))))
    ```

For HTTP API:
    ```python
    from idea_analysis.api.app import app
    ```
"""

from idea_analysis.cache import SimilarityCache
from idea_analysis.config import Settings, get_settings, settings
from idea_analysis.entities import AnalysisRequest, AnalysisResult, GoalContext, ScoreBreakdown
from idea_analysis.errors import AnalysisError, ErrorType, classify_error
from idea_analysis.protocols import AnalysisProvider
from idea_analysis.repositories import ClaudeProvider, OllamaProvider, OpenAIProvider, RuleBasedProvider
from idea_analysis.services import CachedProvider, FallbackChain, ProviderManager, QualityTracker

__all__ = [
    # Configuration
    "settings",
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "AnalysisProvider",
    # Entities (domain models)
    "AnalysisRequest",
    "AnalysisResult",
    "GoalContext",
    "ScoreBreakdown",
    # Errors
    "AnalysisError",
    "ErrorType",
    "classify_error",
    # Repositories (backends)
    "OllamaProvider",
    "OpenAIProvider",
    "ClaudeProvider",
    "RuleBasedProvider",
    # Services (business logic)
    "SimilarityCache",
    "CachedProvider",
    "FallbackChain",
    "ProviderManager",
    "QualityTracker",
]
