"""
LLM Router
==========
Decides which chat provider answers a bug detection prompt.

Routing Strategy:
    1. Try the first healthy provider in priority order (Groq, Gemini, Ollama)
    2. On failure (HTTP error, timeout, rate limit, empty reply) → next healthy provider
    3. When every provider has failed → the client raises LLMGatewayError

Provider Health Tracking:
    - Track consecutive failures per provider
    - After PROVIDER_COOLDOWN_THRESHOLD failures in a row, skip the provider
      for PROVIDER_COOLDOWN_SKIP_COUNT selections
    - Providers without credentials are never selected
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.core.config import (
    GEMINI_API_KEY, GROQ_API_KEY, OLLAMA_BASE_URL, OLLAMA_MODEL,
    LLM_TIMEOUT_SECONDS,
    PROVIDER_COOLDOWN_THRESHOLD, PROVIDER_COOLDOWN_SKIP_COUNT,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Provider Configuration
# ---------------------------------------------------------------------------
@dataclass
class ProviderConfig:
    """Configuration for a single chat provider."""
    name: str
    api_key: str
    base_url: str
    model: str
    max_retries: int = 2
    timeout_seconds: float = LLM_TIMEOUT_SECONDS
    requires_key: bool = True

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or not self.requires_key


GROQ_CONFIG = ProviderConfig(
    name="groq",
    api_key=GROQ_API_KEY or "",
    base_url="https://api.groq.com/openai/v1",
    model="llama-3.3-70b-versatile",
)

GEMINI_CONFIG = ProviderConfig(
    name="gemini",
    api_key=GEMINI_API_KEY or "",
    base_url="https://generativelanguage.googleapis.com/v1beta",
    model="gemini-2.0-flash",
)

OLLAMA_CONFIG = ProviderConfig(
    name="ollama",
    api_key="",
    base_url=OLLAMA_BASE_URL,
    model=OLLAMA_MODEL,
    max_retries=1,
    requires_key=False,
)


# ---------------------------------------------------------------------------
# Provider Health Tracker
# ---------------------------------------------------------------------------
@dataclass
class ProviderHealth:
    """
    Failure streak and cooldown for one provider.

    A provider that fails max_failures times in a row sits out the next
    PROVIDER_COOLDOWN_SKIP_COUNT selections. Coming back, it keeps a streak
    of max_failures - 1, so one more failure sends it straight back.
    """
    name: str = ""
    consecutive_failures: int = 0
    is_healthy: bool = True
    max_failures: int = PROVIDER_COOLDOWN_THRESHOLD
    cooldown_remaining: int = 0

    @property
    def cooling_down(self) -> bool:
        return self.cooldown_remaining > 0

    def record_failure(self) -> None:
        self.consecutive_failures += 1
        if self.is_healthy and self.consecutive_failures >= self.max_failures:
            self._start_cooldown()

    def record_success(self) -> None:
        self.consecutive_failures = 0

    def tick_cooldown(self) -> None:
        """Count one selection round against the cooldown."""
        if not self.cooling_down:
            return
        self.cooldown_remaining -= 1
        if not self.cooling_down:
            self.is_healthy = True
            self.consecutive_failures = max(1, self.max_failures - 1)
            logger.info("Provider %s back in rotation", self.name or "?")

    def _start_cooldown(self) -> None:
        self.is_healthy = False
        self.cooldown_remaining = PROVIDER_COOLDOWN_SKIP_COUNT
        logger.warning(
            "Provider %s failed %d times in a row, skipping it for %d selections",
            self.name or "?", self.consecutive_failures, self.cooldown_remaining,
        )


# ---------------------------------------------------------------------------
# LLM Router
# ---------------------------------------------------------------------------
class LLMRouter:
    """
    Routes chat requests to the best available provider.

    Usage:
        router = LLMRouter()
        config = router.get_provider()
        # ... make request ...
        router.report_success("groq")   # or report_failure("groq")
    """

    def __init__(self, providers: Optional[List[ProviderConfig]] = None) -> None:
        self._providers: List[ProviderConfig] = list(
            providers or [GROQ_CONFIG, GEMINI_CONFIG, OLLAMA_CONFIG]
        )
        self._health: Dict[str, ProviderHealth] = {
            p.name: ProviderHealth(name=p.name) for p in self._providers
        }

    def _available(self, provider: ProviderConfig) -> bool:
        health = self.get_health(provider.name)
        return provider.is_configured and health is not None and health.is_healthy

    def get_provider(self) -> Optional[ProviderConfig]:
        """
        Get the best available provider.

        Returns
        -------
        ProviderConfig or None
            The first configured, healthy provider. When every configured
            provider is cooling down, the first configured one is returned
            as a last resort; None only when nothing is configured at all.
        """
        for h in self._health.values():
            h.tick_cooldown()

        for provider in self._providers:
            if self._available(provider):
                logger.debug("Selected provider: %s", provider.name)
                return provider

        configured = [p for p in self._providers if p.is_configured]
        if configured:
            logger.warning("All providers unhealthy, falling back to %s", configured[0].name)
            return configured[0]
        logger.error("No chat provider is configured")
        return None

    def get_fallback_provider(self, *exclude_names: str) -> Optional[ProviderConfig]:
        """Next configured, healthy provider not in exclude_names, or None."""
        for provider in self._providers:
            if provider.name not in exclude_names and self._available(provider):
                logger.info(
                    "Falling back to %s (skipping %s)",
                    provider.name, ", ".join(exclude_names),
                )
                return provider
        return None

    def report_success(self, provider_name: str) -> None:
        health = self.get_health(provider_name)
        if health:
            health.record_success()

    def report_failure(self, provider_name: str) -> None:
        health = self.get_health(provider_name)
        if health:
            health.record_failure()

    def get_health(self, provider_name: str) -> Optional[ProviderHealth]:
        """Health tracker for a provider, or None for an unknown name."""
        return self._health.get(provider_name)

    @property
    def provider_health_state(self) -> Dict[str, Any]:
        """Expose per-provider health for the /health endpoint."""
        state: Dict[str, Any] = {}
        for p in self._providers:
            h = self._health[p.name]
            state[p.name] = {
                "configured": p.is_configured,
                "is_healthy": h.is_healthy,
                "consecutive_failures": h.consecutive_failures,
                "cooldown_remaining": h.cooldown_remaining,
            }
        return state
