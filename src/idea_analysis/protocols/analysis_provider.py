"""Analysis provider protocol.

Defines the capability contract every analysis backend, decorator and
chain satisfies.

Implementations include:
- Ollama (local model server)
- OpenAI-style hosted API
- Claude-style hosted API
- Rule-based scoring (never calls a network)
- CachedProvider and FallbackChain, which wrap other providers
"""

from typing import Protocol, runtime_checkable

from idea_analysis.entities import AnalysisRequest, AnalysisResult


@runtime_checkable
class AnalysisProvider(Protocol):
    """Protocol for analysis backends.

    Any type that implements these members satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from idea_analysis.protocols import AnalysisProvider

        provider: AnalysisProvider = OllamaProvider.create()
        provider: AnalysisProvider = CachedProvider(provider)
        provider: AnalysisProvider = FallbackChain([provider, RuleBasedProvider()])
        ```
    """

    @property
    def name(self) -> str:
        """Return the provider name.

        Returns:
            Identifier used in results, logs and metrics (e.g., "ollama")
        """
        ...

    def is_available(self) -> bool:
        """Cheap reachability or credential check.

        Returns:
            True if the provider is worth trying, False otherwise
        """
        ...

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Analyze an idea.

        Args:
            request: The idea text and goal context

        Returns:
            The analysis result

        Raises:
            AnalysisError: If the analysis fails
        """
        ...
