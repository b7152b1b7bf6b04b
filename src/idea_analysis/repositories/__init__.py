"""Analysis backend implementations.

This package contains concrete implementations of the AnalysisProvider protocol:
    - OllamaProvider: local model server, no retries
    - OpenAIProvider: OpenAI-style chat completions, retried and rate limited
    - ClaudeProvider: Claude-style messages API, retried and rate limited
    - RuleBasedProvider: offline heuristics, always available
"""

from .base_http_provider import BaseHTTPProvider
from .claude_provider import ClaudeProvider
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider
from .rule_based_provider import KeywordScoringEngine, RuleBasedProvider

__all__ = [
    "BaseHTTPProvider",
    "ClaudeProvider",
    "KeywordScoringEngine",
    "OllamaProvider",
    "OpenAIProvider",
    "RuleBasedProvider",
]
