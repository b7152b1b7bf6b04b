import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class ProviderConfig:
    """Connection parameters for a single analysis backend."""

    base_url: str
    model: str
    timeout_seconds: float = 30.0
    api_key: str | None = None

    @property
    def has_credentials(self) -> bool:
        """Check whether an API key is configured."""
        return bool(self.api_key)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Ollama (local model server)
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama2")
    ollama_timeout: float = float(os.getenv("OLLAMA_TIMEOUT", "30"))

    # OpenAI-style hosted API
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1/chat/completions")
    openai_timeout: float = float(os.getenv("OPENAI_TIMEOUT", "30"))

    # Claude-style hosted API
    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")
    claude_model: str = os.getenv("CLAUDE_MODEL", "claude-3-5-sonnet-20241022")
    claude_base_url: str = os.getenv("CLAUDE_BASE_URL", "https://api.anthropic.com/v1/messages")
    claude_timeout: float = float(os.getenv("CLAUDE_TIMEOUT", "30"))

    # Cache
    cache_enabled: bool = os.getenv("LLM_CACHE_ENABLED", "true").lower() == "true"
    cache_ttl: int = int(os.getenv("LLM_CACHE_TTL", "86400"))  # 24 hours default
    cache_max_size: int = int(os.getenv("LLM_CACHE_MAX_SIZE", "1000"))
    cache_similarity_threshold: float = float(os.getenv("LLM_CACHE_SIMILARITY_THRESHOLD", "0.85"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    @property
    def ollama_config(self) -> ProviderConfig:
        """Connection settings for the local Ollama server."""
        return ProviderConfig(
            base_url=self.ollama_base_url,
            model=self.ollama_model,
            timeout_seconds=self.ollama_timeout,
        )

    @property
    def openai_config(self) -> ProviderConfig:
        """Connection settings for the OpenAI-style API."""
        return ProviderConfig(
            base_url=self.openai_base_url,
            model=self.openai_model,
            timeout_seconds=self.openai_timeout,
            api_key=self.openai_api_key,
        )

    @property
    def claude_config(self) -> ProviderConfig:
        """Connection settings for the Claude-style API."""
        return ProviderConfig(
            base_url=self.claude_base_url,
            model=self.claude_model,
            timeout_seconds=self.claude_timeout,
            api_key=self.anthropic_api_key,
        )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.cache_similarity_threshold <= 1:
            raise ValueError("LLM_CACHE_SIMILARITY_THRESHOLD must be between 0 and 1 for Jaccard similarity")

        if self.cache_ttl <= 0:
            raise ValueError(f"LLM_CACHE_TTL must be positive, got {self.cache_ttl}")

        if self.cache_max_size < 1:
            raise ValueError(f"LLM_CACHE_MAX_SIZE must be at least 1, got {self.cache_max_size}")

        for name in ("ollama_timeout", "openai_timeout", "claude_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
