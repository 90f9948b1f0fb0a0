"""
LLM provider client.

Sends a single prompt to the configured provider and returns the reply
text.  OpenAI and Groq share the OpenAI chat-completions wire format;
Gemini uses its REST ``generateContent`` endpoint (several API keys may be
configured and are used round-robin); Ollama uses ``/api/generate``.

Each call is one awaited request: no retries and no streaming.  Any HTTP,
transport or payload problem is raised as ``LLMProviderError``.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from summariq.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4000

SUPPORTED_PROVIDERS = frozenset({"openai", "groq", "gemini", "ollama"})


class LLMProviderError(RuntimeError):
    """The provider could not be reached or returned an unusable reply."""


class LLMClient:
    """Async client for the provider selected by ``AI_PROVIDER``."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or default_settings
        self.provider = self.config.AI_PROVIDER.lower()
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unsupported AI_PROVIDER {self.config.AI_PROVIDER!r}. "
                f"Expected one of: {', '.join(sorted(SUPPORTED_PROVIDERS))}"
            )
        self.timeout = httpx.Timeout(float(self.config.LLM_TIMEOUT), connect=10.0)
        self._transport = transport
        self._gemini_keys: List[str] = self.config.get_gemini_keys()
        self._gemini_key_index = 0

    @property
    def model(self) -> str:
        return {
            "openai": self.config.OPENAI_MODEL,
            "groq": self.config.GROQ_MODEL,
            "gemini": self.config.GEMINI_MODEL,
            "ollama": self.config.OLLAMA_LLM_MODEL,
        }[self.provider]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        model: Optional[str] = None,
    ) -> str:
        """
        Send *prompt* to the provider and return the reply text.

        Raises:
            LLMProviderError: missing credentials, HTTP error, timeout or a
                              reply without text content.
        """
        system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        t0 = time.perf_counter()

        if self.provider == "gemini":
            text = await self._call_gemini(prompt, system_prompt, model)
        elif self.provider == "ollama":
            text = await self._call_ollama(prompt, system_prompt, temperature, max_tokens, model)
        else:
            text = await self._call_chat_completions(
                prompt, system_prompt, temperature, max_tokens, model
            )

        logger.info(
            "%s reply: %d chars in %.0f ms",
            self.provider,
            len(text),
            (time.perf_counter() - t0) * 1000,
        )
        return text

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    async def _call_chat_completions(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        model: Optional[str],
    ) -> str:
        """POST to an OpenAI-compatible /chat/completions endpoint (OpenAI, Groq)."""
        if self.provider == "groq":
            api_key, base_url, name = self.config.GROQ_API_KEY, self.config.GROQ_BASE_URL, "Groq"
        else:
            api_key, base_url, name = self.config.OPENAI_API_KEY, self.config.OPENAI_BASE_URL, "OpenAI"
        if not api_key:
            raise LLMProviderError(f"{name} API key not configured")

        payload = await self._post(
            f"{base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "model": model or self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            provider=name,
        )

        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMProviderError(f"{name} reply missing choices[0].message.content") from exc
        return _require_text(content, name)

    async def _call_gemini(
        self,
        prompt: str,
        system_prompt: str,
        model: Optional[str],
    ) -> str:
        """POST to Gemini generateContent; the system prompt is prepended."""
        api_key = self._next_gemini_key()
        base_url = self.config.GEMINI_BASE_URL.rstrip("/")
        payload = await self._post(
            f"{base_url}/models/{model or self.model}:generateContent",
            params={"key": api_key},
            json={"contents": [{"parts": [{"text": f"{system_prompt}\n\n{prompt}"}]}]},
            provider="Gemini",
        )

        try:
            content = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMProviderError("Gemini reply missing candidates[0] text") from exc
        return _require_text(content, "Gemini")

    async def _call_ollama(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        model: Optional[str],
    ) -> str:
        """POST to local Ollama /api/generate and return the response text."""
        payload = await self._post(
            f"{self.config.OLLAMA_BASE_URL.rstrip('/')}/api/generate",
            json={
                "model": model or self.model,
                "system": system_prompt,
                "prompt": prompt,
                "stream": False,
                "options": {"num_predict": max_tokens, "temperature": temperature},
            },
            provider="Ollama",
        )
        return _require_text(payload.get("response"), "Ollama")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _next_gemini_key(self) -> str:
        if not self._gemini_keys:
            raise LLMProviderError("No Gemini API keys configured")
        key = self._gemini_keys[self._gemini_key_index]
        self._gemini_key_index = (self._gemini_key_index + 1) % len(self._gemini_keys)
        return key

    async def _post(
        self,
        url: str,
        *,
        json: Dict[str, Any],
        provider: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, json=json, headers=headers, params=params)
        except httpx.TimeoutException as exc:
            raise LLMProviderError(f"{provider} request timed out") from exc
        except httpx.HTTPError as exc:
            raise LLMProviderError(f"{provider} request failed: {exc}") from exc

        if resp.status_code != 200:
            logger.error("%s returned HTTP %d: %s", provider, resp.status_code, resp.text[:300])
            raise LLMProviderError(
                f"{provider} API error: {resp.status_code} - {resp.text[:200]}"
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise LLMProviderError(f"{provider} returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise LLMProviderError(f"{provider} returned an unexpected payload")
        return body


def _require_text(content: Any, provider: str) -> str:
    if not isinstance(content, str) or not content.strip():
        raise LLMProviderError(f"{provider} reply contained no text")
    return content
