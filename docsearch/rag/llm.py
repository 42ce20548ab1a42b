from __future__ import annotations

"""Answer generators backed by hosted or local LLM providers."""

from dataclasses import dataclass, field
import asyncio
import logging
from typing import Any, Protocol

import httpx


class GenerationError(RuntimeError):
    """Raised when answer generation fails or the response is invalid."""
    pass


logger = logging.getLogger(__name__)


class AnswerGenerator(Protocol):
    """Prompt in, free-form answer text out."""

    async def generate(self, prompt: str, max_tokens: int) -> str:
        ...


async def _post_json(
    url: str,
    payload: dict[str, Any],
    *,
    timeout: float,
    headers: dict[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """POST a JSON payload and return the decoded JSON object."""
    try:
        if client is not None:
            response = await client.post(url, json=payload, headers=headers, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
    except httpx.HTTPError as exc:
        raise GenerationError(str(exc)) from exc
    except ValueError as exc:
        raise GenerationError("LLM response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise GenerationError("Invalid LLM response")
    return data


@dataclass(frozen=True)
class OllamaGenerator:
    """Answer generator backed by the Ollama chat API."""
    base_url: str
    model: str
    temperature: float
    timeout: float
    client: httpx.AsyncClient | None = field(default=None, compare=False, repr=False)

    async def generate(self, prompt: str, max_tokens: int) -> str:
        """Generate an answer using Ollama."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": max_tokens,
            },
        }
        data = await _post_json(
            f"{self.base_url}/api/chat",
            payload,
            timeout=self.timeout,
            client=self.client,
        )
        message = data.get("message")
        if not isinstance(message, dict):
            raise GenerationError("Invalid LLM response")
        content = message.get("content")
        if not isinstance(content, str):
            raise GenerationError("Invalid LLM response")
        return content.strip()


@dataclass(frozen=True)
class OpenAIGenerator:
    """Answer generator backed by OpenAI-compatible chat completions."""
    api_key: str
    base_url: str
    model: str
    temperature: float
    timeout: float
    client: httpx.AsyncClient | None = field(default=None, compare=False, repr=False)

    async def generate(self, prompt: str, max_tokens: int) -> str:
        """Generate an answer using chat completions."""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": max_tokens,
        }
        data = await _post_json(
            f"{self.base_url}/chat/completions",
            payload,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            client=self.client,
        )
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise GenerationError("Invalid OpenAI response")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise GenerationError("Invalid OpenAI response")
        content = message.get("content")
        if not isinstance(content, str):
            raise GenerationError("Invalid OpenAI response content")
        return content.strip()


@dataclass(frozen=True)
class GeminiGenerator:
    """Answer generator backed by Gemini generative models."""
    api_key: str
    model: str
    temperature: float
    timeout: float

    async def generate(self, prompt: str, max_tokens: int) -> str:
        """Generate an answer using Gemini."""
        try:
            import google.generativeai as genai
        except ImportError as exc:
            raise GenerationError("google-generativeai is required for GeminiGenerator") from exc

        def _run() -> str:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(self.model)
            response = model.generate_content(
                prompt,
                generation_config={
                    "temperature": self.temperature,
                    "max_output_tokens": max_tokens,
                },
            )
            return getattr(response, "text", "") or ""

        try:
            content = await asyncio.wait_for(asyncio.to_thread(_run), timeout=self.timeout)
        except Exception as exc:
            raise GenerationError(str(exc)) from exc
        return content.strip()


def build_answer_generator(
    provider: str,
    *,
    api_key_openai: str | None,
    api_key_gemini: str | None,
    openai_base_url: str,
    openai_model: str | None,
    gemini_model: str | None,
    ollama_base_url: str,
    ollama_model: str,
    temperature: float,
    timeout: float,
) -> OllamaGenerator | OpenAIGenerator | GeminiGenerator:
    """Factory for answer generators based on provider."""
    normalized = provider.strip().lower()
    if normalized in {"openai"}:
        if not api_key_openai:
            raise GenerationError("OPENAI_API_KEY is required for OpenAI provider")
        if not openai_model:
            raise GenerationError("OPENAI_CHAT_MODEL is required for OpenAI provider")
        return OpenAIGenerator(
            api_key=api_key_openai,
            base_url=openai_base_url.rstrip("/"),
            model=openai_model,
            temperature=temperature,
            timeout=timeout,
        )
    if normalized in {"gemini", "google"}:
        if not api_key_gemini:
            raise GenerationError("GEMINI_API_KEY is required for Gemini provider")
        if not gemini_model:
            raise GenerationError("GEMINI_CHAT_MODEL is required for Gemini provider")
        return GeminiGenerator(
            api_key=api_key_gemini,
            model=gemini_model,
            temperature=temperature,
            timeout=timeout,
        )
    logger.debug("answer_generator_default", extra={"provider": normalized or "ollama"})
    return OllamaGenerator(
        base_url=ollama_base_url.rstrip("/"),
        model=ollama_model,
        temperature=temperature,
        timeout=timeout,
    )
