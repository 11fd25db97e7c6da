"""
LLM Client
==========
Asynchronous chat gateway used by the bug detector.
Supports Groq (OpenAI-compatible), Gemini (REST) and a local Ollama server.

Reply Shapes:
    The client does not interpret replies; it hands back what the provider
    produced, and the detector's envelope unwrapper finds the text:
    - Gemini  → plain text (first candidate part)
    - Groq    → {"detail": <chat completion body>}
    - Ollama  → <chat body>, i.e. {"message": {"content": ...}, ...}

Provider Fallback:
    - Each provider has independent retry logic (max_retries per provider)
    - HTTP 429 switches provider immediately
    - Fallback triggers on: HTTP error, timeout, rate limit, empty reply
    - When every provider fails, LLMGatewayError is raised — one catchable
      error, never a partial result
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from app.detector.envelope import find_reply_text
from app.llm.prompts import SYSTEM_PROMPT
from app.llm.router import LLMRouter, ProviderConfig

logger = logging.getLogger(__name__)


class LLMGatewayError(RuntimeError):
    """Raised when no provider produced a reply."""


# ---------------------------------------------------------------------------
# Request / Reply
# ---------------------------------------------------------------------------
@dataclass
class ChatOptions:
    """Per-request generation settings."""
    system_prompt: str = SYSTEM_PROMPT
    temperature: float = 0.1
    max_tokens: int = 8192


@dataclass
class ChatReply:
    """Unparsed reply from a provider."""
    content: Union[str, Dict[str, Any]]
    provider_name: str


def _is_empty(content: Any) -> bool:
    """True when the reply carries no answer text, whatever its envelope."""
    text = find_reply_text(content)
    return text is None or not text.strip()


# ---------------------------------------------------------------------------
# LLM Client
# ---------------------------------------------------------------------------
class LLMClient:
    """
    Async HTTP client for calling chat providers.

    Usage:
        client = LLMClient()
        reply = await client.chat_with_fallback(prompt, ChatOptions(), router)
        await client.close()
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._http: Optional[httpx.AsyncClient] = None
        self._transport = transport

    async def _get_http(self, timeout: float) -> httpx.AsyncClient:
        """Lazy-initialise the HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout),
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None

    async def chat(
        self,
        prompt: str,
        options: ChatOptions,
        provider: ProviderConfig,
    ) -> ChatReply:
        """
        Send a prompt to one provider, retrying up to provider.max_retries.

        Raises
        ------
        LLMGatewayError
            All attempts failed or came back empty.
        """
        for attempt in range(1, provider.max_retries + 1):
            try:
                if provider.name == "gemini":
                    content = await self._call_gemini(prompt, options, provider)
                elif provider.name == "ollama":
                    content = await self._call_ollama(prompt, options, provider)
                else:
                    content = await self._call_openai_compatible(prompt, options, provider)

                if not _is_empty(content):
                    return ChatReply(content=content, provider_name=provider.name)

                logger.warning(
                    "Provider %s attempt %d: empty reply", provider.name, attempt
                )

            except httpx.TimeoutException:
                logger.warning(
                    "Provider %s attempt %d: timeout", provider.name, attempt
                )
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.warning(
                    "Provider %s attempt %d: HTTP %d", provider.name, attempt, status
                )
                if status == 429:  # Rate limit
                    break  # Don't retry, switch provider immediately
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(
                    "Provider %s attempt %d: %s", provider.name, attempt, e
                )

        raise LLMGatewayError(f"All {provider.max_retries} attempts failed for {provider.name}")

    async def _call_gemini(
        self,
        prompt: str,
        options: ChatOptions,
        provider: ProviderConfig,
    ) -> str:
        """Call Gemini REST API and return the first candidate's text."""
        http = await self._get_http(provider.timeout_seconds)
        url = f"{provider.base_url}/models/{provider.model}:generateContent"
        payload = {
            "system_instruction": {"parts": [{"text": options.system_prompt}]},
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": options.temperature,
                "maxOutputTokens": options.max_tokens,
            },
        }
        resp = await http.post(url, json=payload, params={"key": provider.api_key})
        resp.raise_for_status()
        data = resp.json()

        try:
            candidates = data.get("candidates", [])
            if candidates:
                parts = candidates[0].get("content", {}).get("parts", [])
                if parts:
                    return parts[0].get("text", "")
        except (IndexError, KeyError, TypeError, AttributeError):
            pass
        return ""

    async def _call_openai_compatible(
        self,
        prompt: str,
        options: ChatOptions,
        provider: ProviderConfig,
    ) -> Dict[str, Any]:
        """Call an OpenAI-compatible API (Groq, etc.); the body is returned under "detail"."""
        http = await self._get_http(provider.timeout_seconds)
        url = f"{provider.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {provider.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": provider.model,
            "messages": [
                {"role": "system", "content": options.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }
        resp = await http.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        return {"detail": resp.json()}

    async def _call_ollama(
        self,
        prompt: str,
        options: ChatOptions,
        provider: ProviderConfig,
    ) -> Dict[str, Any]:
        """Call a local Ollama chat endpoint; its body already carries message.content."""
        http = await self._get_http(provider.timeout_seconds)
        url = f"{provider.base_url}/api/chat"
        payload = {
            "model": provider.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": options.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "options": {
                "temperature": options.temperature,
                "num_predict": options.max_tokens,
            },
        }
        resp = await http.post(url, json=payload)
        resp.raise_for_status()
        return resp.json()

    async def chat_with_fallback(
        self,
        prompt: str,
        options: ChatOptions,
        router: LLMRouter,
    ) -> ChatReply:
        """
        Send a prompt with automatic provider fallback.

        Raises
        ------
        LLMGatewayError
            No provider is configured, or every provider tried has failed.
        """
        primary = router.get_provider()
        if primary is None:
            raise LLMGatewayError("No chat provider configured")

        tried = [primary.name]
        provider: Optional[ProviderConfig] = primary
        while provider is not None:
            try:
                reply = await self.chat(prompt, options, provider)
            except LLMGatewayError as e:
                logger.warning("%s", e)
                router.report_failure(provider.name)
                provider = router.get_fallback_provider(*tried)
                if provider is not None:
                    tried.append(provider.name)
                continue
            router.report_success(provider.name)
            return reply

        raise LLMGatewayError(f"All providers failed ({', '.join(tried)})")
