"""
LLM Service - Handles interactions with different LLM providers
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

import aiohttp

from .errors import RangeEditError

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


class LLMService:
    """Service for interacting with various LLM providers"""

    def __init__(self, config: dict[str, Any]):
        self.config = config
        self.provider = config.get("provider", "gemini")
        editing = config.get("editing", {})
        self.temperature = editing.get("temperature", 0.3)
        self.timeout_seconds = editing.get("timeoutSeconds", 60)
        self.max_retries = max(1, editing.get("maxRetries", 3))
        self.retry_base_seconds = editing.get("retryBaseSeconds", 1.0)

    # ========== Config Helpers ==========

    def _get_gemini_config(self) -> tuple[str, str, str]:
        """Get Gemini config: (api_key, model, base_url). Raises if api_key missing."""
        cfg = self.config.get("gemini", {})
        api_key = cfg.get("apiKey")
        if not api_key:
            raise RangeEditError("Gemini API key not configured")
        model = cfg.get("model", "gemini-2.5-flash")
        base_url = f"https://generativelanguage.googleapis.com/v1beta/models/{model}"
        return api_key, model, base_url

    def _get_openai_config(self) -> tuple[str, str, dict[str, str]]:
        """Get OpenAI config: (model, url, headers). Raises if api_key missing."""
        cfg = self.config.get("openai", {})
        api_key = cfg.get("apiKey")
        if not api_key:
            raise RangeEditError("OpenAI API key not configured")
        model = cfg.get("model", "gpt-4")
        url = "https://api.openai.com/v1/chat/completions"
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        return model, url, headers

    def _get_openrouter_config(self) -> tuple[str, str, dict[str, str]]:
        """Get OpenRouter config: (model, url, headers). Raises if api_key missing."""
        cfg = self.config.get("openrouter", {})
        api_key = cfg.get("apiKey")
        if not api_key:
            raise RangeEditError("OpenRouter API key not configured")
        model = cfg.get("model", "openai/gpt-4o-mini")
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Title": cfg.get("siteName", "Diff & Commit"),
        }
        return model, OPENROUTER_URL, headers

    def _get_vllm_config(self) -> tuple[str, str, dict[str, str]]:
        """Get vLLM config: (model, url, headers)."""
        cfg = self.config.get("vllm", {})
        endpoint = cfg.get("endpoint", "http://localhost:8000")
        model = cfg.get("model", "default")
        url = f"{endpoint}/v1/chat/completions"
        headers = {"Content-Type": "application/json"}
        if cfg.get("apiKey"):
            headers["Authorization"] = f"Bearer {cfg['apiKey']}"
        return model, url, headers

    # ========== Message/Payload Builders ==========

    def _build_openai_messages(self, prompt: str, system: str | None = None) -> list:
        """Build OpenAI-style messages array"""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _build_openai_payload(self, model: str, messages: list, max_tokens: int = 4096) -> dict[str, Any]:
        """Build OpenAI-compatible request payload"""
        return {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }

    def _build_gemini_payload(self, prompt: str, system: str | None = None) -> dict[str, Any]:
        """Build Gemini API request payload"""
        payload: dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "topP": 0.95,
                "maxOutputTokens": 8192,
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        return payload

    # ========== Transport ==========

    async def _retry_with_backoff(self, operation, provider: str = "API"):
        """Execute operation with exponential backoff retry logic"""
        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                return await operation()
            except asyncio.TimeoutError:
                if last_attempt:
                    raise RangeEditError(f"{provider} request timeout after {self.max_retries} retries")
                wait_time = (2**attempt) * 3 * self.retry_base_seconds
                logger.warning(
                    "[LLMService] Request timeout. Retrying in %ss... (attempt %d/%d)",
                    wait_time,
                    attempt + 1,
                    self.max_retries,
                )
            except _RetryableStatus as e:
                if last_attempt:
                    raise RangeEditError(f"{provider} API error ({e.status}) after {self.max_retries} retries")
                wait_time = (2**attempt) * (10 if e.status == 429 else 5) * self.retry_base_seconds
                logger.warning(
                    "[LLMService] %s returned %d. Retrying in %ss... (attempt %d/%d)",
                    provider,
                    e.status,
                    wait_time,
                    attempt + 1,
                    self.max_retries,
                )
            except aiohttp.ClientError as e:
                if last_attempt:
                    raise RangeEditError(f"{provider} network error: {e}") from e
                wait_time = (2**attempt) * 2 * self.retry_base_seconds
                logger.warning("[LLMService] Network error: %s. Retrying in %ss...", e, wait_time)
            await asyncio.sleep(wait_time)

    @asynccontextmanager
    async def _request(self, url: str, payload: dict[str, Any], headers: dict[str, str] | None, provider: str):
        """Context manager for HTTP POST requests with automatic session cleanup"""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, json=payload, headers=headers) as response:
                if response.status in (429, 503):
                    raise _RetryableStatus(response.status)
                if response.status != 200:
                    error_text = await response.text()
                    logger.error("[LLMService] %s API Error: %s", provider, error_text)
                    raise RangeEditError(f"{provider} API error ({response.status}): {error_text}")
                yield response

    async def _request_json(
        self, url: str, payload: dict[str, Any], headers: dict[str, str] | None, provider: str
    ) -> dict[str, Any]:
        """Make request with retries and return JSON response"""

        async def _execute_request():
            async with self._request(url, payload, headers, provider) as response:
                return await response.json()

        return await self._retry_with_backoff(_execute_request, provider)

    # ========== Response Parsers ==========

    def _parse_openai_response(self, data: dict[str, Any]) -> str:
        """Parse OpenAI-compatible response format"""
        if "choices" in data and len(data["choices"]) > 0:
            choice = data["choices"][0]
            if "message" in choice and "content" in choice["message"]:
                return choice["message"]["content"]
            elif "text" in choice:
                return choice["text"]
        raise RangeEditError("No valid response from API")

    def _parse_gemini_response(self, data: dict[str, Any]) -> str:
        """Parse Gemini API response format"""
        if "candidates" in data and len(data["candidates"]) > 0:
            candidate = data["candidates"][0]
            if "content" in candidate and "parts" in candidate["content"]:
                parts = candidate["content"]["parts"]
                if len(parts) > 0 and "text" in parts[0]:
                    return parts[0]["text"]
        raise RangeEditError("No valid response from Gemini API")

    # ========== Public API ==========

    async def generate_response(self, prompt: str, system: str | None = None) -> str:
        """Generate a response from the configured LLM provider"""
        if self.provider == "gemini":
            return await self._call_gemini(prompt, system)
        elif self.provider in ("openai", "vllm", "openrouter"):
            return await self._call_openai_compatible(prompt, system)
        else:
            raise RangeEditError(f"Unsupported provider: {self.provider}")

    async def _call_gemini(self, prompt: str, system: str | None = None) -> str:
        """Call Google Gemini API"""
        api_key, model, base_url = self._get_gemini_config()
        logger.info("[LLMService] Calling Gemini API with model: %s", model)

        url = f"{base_url}:generateContent?key={api_key}"
        data = await self._request_json(url, self._build_gemini_payload(prompt, system), None, "Gemini")
        response_text = self._parse_gemini_response(data)
        logger.info("[LLMService] Received response from %s (length: %d chars)", model, len(response_text))
        return response_text

    async def _call_openai_compatible(self, prompt: str, system: str | None = None) -> str:
        """Call an OpenAI compatible chat completions endpoint"""
        if self.provider == "openai":
            model, url, headers = self._get_openai_config()
        elif self.provider == "openrouter":
            model, url, headers = self._get_openrouter_config()
        else:
            model, url, headers = self._get_vllm_config()
        logger.info("[LLMService] Calling %s with model: %s", self.provider, model)

        messages = self._build_openai_messages(prompt, system)
        data = await self._request_json(url, self._build_openai_payload(model, messages), headers, self.provider)
        return self._parse_openai_response(data)


class _RetryableStatus(Exception):
    """Transient HTTP status (rate limit or overload)"""

    def __init__(self, status: int):
        super().__init__(f"HTTP {status}")
        self.status = status
