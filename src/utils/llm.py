"""
Client for the external text-generation service.

Providers make exactly one request per call; LLMClient owns retries with
exponential backoff and validation of structured (JSON) replies against
pydantic models.
"""

import asyncio
import json
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type, TypeVar, Union

import aiohttp
from pydantic import BaseModel, ValidationError as PydanticValidationError

try:
    import google.genai as genai
    from google.genai import types as genai_types
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_INLINE_JSON = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}", re.DOTALL)
_RATE_LIMIT_MARKERS = ("rate limit", "quota", "429", "resource_exhausted")


class LLMError(Exception):
    """Base exception for text-generation failures."""
    pass


class RateLimitError(LLMError):
    """The service rejected the request for rate or quota reasons."""
    pass


class ValidationError(LLMError):
    """The reply is not JSON matching the requested model."""
    pass


class APIError(LLMError):
    """Transport, timeout or HTTP error from the service."""
    pass


@dataclass
class LLMRequest:
    prompt: str
    response_format: Optional[Type[BaseModel]] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def full_prompt(self) -> str:
        """Prompt with the JSON schema of the response format appended."""
        if self.response_format is None:
            return self.prompt
        schema = json.dumps(self.response_format.model_json_schema(), indent=2)
        return f"{self.prompt}\n\nRespond only with valid JSON matching this schema:\n```json\n{schema}\n```"


@dataclass
class LLMResponse:
    content: str
    parsed_data: Optional[BaseModel] = None
    latency_ms: Optional[float] = None
    token_usage: Dict[str, int] = field(default_factory=dict)


def extract_json(content: str) -> Optional[str]:
    """Find the JSON object in a reply: fenced block, whole reply, or first inline object."""
    fenced = _FENCED_JSON.search(content)
    if fenced:
        return fenced.group(1)

    stripped = content.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped

    inline = _INLINE_JSON.search(content)
    return inline.group(0) if inline else None


def parse_structured(content: str, response_format: Type[T]) -> T:
    """Validate reply content against a pydantic model, raising ValidationError."""
    json_str = extract_json(content)
    if not json_str:
        raise ValidationError("No JSON object found in LLM response")
    try:
        return response_format.model_validate(json.loads(json_str))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(f"Failed to parse LLM response: {e}")


def _is_rate_limit(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


class LLMProvider(ABC):
    """One text-generation backend."""

    @abstractmethod
    async def call_single(self, request: LLMRequest) -> LLMResponse:
        """Send one request; raise an LLMError subclass on failure."""
        pass

    def _response(self, request: LLMRequest, content: str, start_time: float, token_usage: Dict[str, int]) -> LLMResponse:
        parsed = None
        if request.response_format is not None and content:
            parsed = parse_structured(content, request.response_format)
        return LLMResponse(
            content=content,
            parsed_data=parsed,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            token_usage=token_usage,
        )


class ClaudeLLMProvider(LLMProvider):
    """Anthropic Messages API over aiohttp."""

    API_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-latest",
        base_url: str = "https://api.anthropic.com/v1/messages",
        timeout: float = 60.0
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        payload = {
            "model": self.model,
            "max_tokens": request.max_tokens or 4096,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": request.full_prompt()}],
        }
        headers = {
            "content-type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.API_VERSION,
        }

        start_time = time.perf_counter()
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.base_url, headers=headers, json=payload) as response:
                    if response.status == 429:
                        raise RateLimitError("Claude rate limit exceeded")
                    if response.status >= 400:
                        raise APIError(f"Claude API error {response.status}: {await response.text()}")
                    data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise APIError(f"Claude request failed: {e}") from e

        blocks = data.get("content") or [{}]
        usage = data.get("usage") or {}
        return self._response(request, blocks[0].get("text", ""), start_time, {
            "input_tokens": usage.get("input_tokens", 0),
            "output_tokens": usage.get("output_tokens", 0),
        })


class GeminiLLMProvider(LLMProvider):
    """Google Gemini through the google-genai SDK, run in a worker thread."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        timeout: float = 60.0
    ):
        if not GEMINI_AVAILABLE:
            raise ImportError("google-genai package not available. Install with: pip install google-genai")

        self.model = model
        self.timeout = timeout
        self.client = genai.Client(api_key=api_key)

    def _generation_config(self, request: LLMRequest):
        options: Dict[str, Any] = {"temperature": request.temperature}
        if request.max_tokens:
            options["max_output_tokens"] = request.max_tokens
        if request.response_format is not None:
            options["response_mime_type"] = "application/json"
        return genai_types.GenerateContentConfig(**options)

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        start_time = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.client.models.generate_content,
                    model=self.model,
                    contents=request.full_prompt(),
                    config=self._generation_config(request),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise APIError(f"Gemini request timed out after {self.timeout}s") from e
        except Exception as e:
            if _is_rate_limit(e):
                raise RateLimitError(f"Gemini rate limit exceeded: {e}") from e
            raise APIError(f"Gemini API error: {e}") from e

        usage = getattr(response, "usage_metadata", None)
        token_usage = {}
        if usage is not None:
            token_usage = {
                "input_tokens": usage.prompt_token_count or 0,
                "output_tokens": usage.candidates_token_count or 0,
            }
        return self._response(request, response.text or "", start_time, token_usage)


class LLMClient:
    """
    Retrying front end for a provider.

    A failed attempt is retried up to max_retries times, sleeping
    retry_delay * 2**attempt seconds first (1s, 2s, 4s with the defaults).
    When a response format is requested, a reply without valid structured
    data counts as a failed attempt.
    """

    def __init__(
        self,
        provider: LLMProvider,
        max_retries: int = 3,
        retry_delay: float = 1.0
    ):
        self.provider = provider
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def backoff_delay(self, attempt: int) -> float:
        return self.retry_delay * (2 ** attempt)

    async def _attempt(self, request: LLMRequest) -> Union[LLMResponse, BaseModel]:
        response = await self.provider.call_single(request)
        if request.response_format is None:
            return response
        if response.parsed_data is None:
            raise ValidationError("LLM returned no structured data")
        return response.parsed_data

    async def call(
        self,
        prompt: str,
        response_format: Optional[Type[T]] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        retry_count: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Union[LLMResponse, T]:
        """Return the parsed model when response_format is given, else the raw LLMResponse."""
        request = LLMRequest(
            prompt=prompt,
            response_format=response_format,
            temperature=temperature,
            max_tokens=max_tokens,
            metadata=metadata or {},
        )
        retries = self.max_retries if retry_count is None else retry_count

        attempt = 0
        while True:
            try:
                result = await self._attempt(request)
            except Exception as e:
                if attempt >= retries:
                    logger.error(f"LLM call failed after {retries} retries: {e}", extra={"metadata": request.metadata})
                    if isinstance(e, LLMError):
                        raise
                    raise LLMError(f"Failed after {retries} retries: {e}") from e

                delay = self.backoff_delay(attempt)
                logger.warning(f"LLM call failed, retrying in {delay:.1f}s ({retries - attempt} left): {e}")
                await asyncio.sleep(delay)
                attempt += 1
                continue

            logger.info("LLM call completed", extra={
                "prompt_length": len(prompt),
                "attempt": attempt + 1,
                "structured": response_format is not None,
            })
            return result


def create_llm_client(
    provider_type: Optional[str] = None,
    api_key: Optional[str] = None,
    settings: Optional[Any] = None,
    **kwargs
) -> LLMClient:
    """
    Build an LLMClient from configuration.

    Without an explicit provider_type, Gemini is used when GEMINI_API_KEY is
    set, otherwise Claude when ANTHROPIC_API_KEY is set.

    Raises:
        ValueError: no usable provider or API key is configured
    """
    if settings is None:
        from mtss_planner.config import LLMConfig
        llm_config = LLMConfig()
    else:
        llm_config = settings.llm

    provider_type = provider_type or llm_config.provider
    if provider_type is None:
        if llm_config.gemini_api_key:
            provider_type = "gemini"
        elif llm_config.anthropic_api_key:
            provider_type = "claude"
        else:
            raise ValueError(
                "No LLM API key found in environment. Please set one of:\n"
                "- GEMINI_API_KEY (recommended)\n"
                "- ANTHROPIC_API_KEY"
            )

    providers = {
        "gemini": (GeminiLLMProvider, llm_config.gemini_api_key),
        "claude": (ClaudeLLMProvider, llm_config.anthropic_api_key),
    }
    if provider_type not in providers:
        raise ValueError(f"Unknown provider type: {provider_type}. Supported: gemini, claude")

    provider_class, configured_key = providers[provider_type]
    api_key = api_key or configured_key
    if not api_key:
        raise ValueError(f"API key required for {provider_type} provider")
    if llm_config.model:
        kwargs.setdefault("model", llm_config.model)

    provider = provider_class(api_key=api_key, timeout=llm_config.request_timeout, **kwargs)
    return LLMClient(
        provider=provider,
        max_retries=llm_config.max_retries,
        retry_delay=llm_config.retry_delay,
    )
