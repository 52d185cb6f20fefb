"""
Tests for the LLM client: retry with backoff, structured parsing and
provider selection.
"""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import BaseModel

from models import InsightList
from mtss_planner.config import LLMConfig
from utils.llm import (
    APIError,
    ClaudeLLMProvider,
    LLMClient,
    LLMError,
    LLMResponse,
    ValidationError,
    create_llm_client,
    extract_json,
    parse_structured,
)
from conftest import FailingProvider, StubProvider


class Answer(BaseModel):
    value: int


class TestRetry:
    """Test retry behaviour of LLMClient.call."""

    @pytest.mark.asyncio
    async def test_success_after_transient_failures(self):
        provider = StubProvider(responses={Answer: Answer(value=42)}, failures=2)
        client = LLMClient(provider=provider, max_retries=3, retry_delay=1.0)

        with patch("utils.llm.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await client.call("question", response_format=Answer)

        assert result == Answer(value=42)
        assert len(provider.requests) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exponential_backoff_then_error(self):
        provider = FailingProvider()
        client = LLMClient(provider=provider, max_retries=3, retry_delay=1.0)

        with patch("utils.llm.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(LLMError):
                await client.call("question")

        assert provider.calls == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_retry_count_override(self):
        provider = FailingProvider()
        client = LLMClient(provider=provider, max_retries=3, retry_delay=0.0)

        with pytest.raises(APIError):
            await client.call("question", retry_count=0)
        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_missing_structured_data_is_retried(self):
        provider = StubProvider()
        client = LLMClient(provider=provider, max_retries=2, retry_delay=0.0)

        with pytest.raises(ValidationError):
            await client.call("question", response_format=Answer)
        assert len(provider.requests) == 3

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self):
        class BrokenProvider(FailingProvider):
            async def call_single(self, request):
                raise RuntimeError("boom")

        client = LLMClient(provider=BrokenProvider(), max_retries=0)
        with pytest.raises(LLMError, match="boom"):
            await client.call("question")

    @pytest.mark.asyncio
    async def test_raw_response_without_format(self):
        class TextProvider(FailingProvider):
            async def call_single(self, request):
                return LLMResponse(content="plain text")

        response = await LLMClient(provider=TextProvider()).call("question")
        assert response.content == "plain text"


class TestStructuredParsing:
    """Test JSON extraction from model output."""

    def test_extract_from_code_block(self):
        content = 'Here you go:\n```json\n{"value": 3}\n```'
        assert extract_json(content) == '{"value": 3}'

    def test_extract_bare_object(self):
        assert extract_json('  {"value": 3}  ') == '{"value": 3}'

    def test_extract_embedded_object(self):
        assert extract_json('Result: {"value": 3} done') == '{"value": 3}'

    def test_extract_nothing(self):
        assert extract_json("no json here") is None

    def test_parse_structured(self):
        parsed = parse_structured('{"insights": [{"title": "A", "text": "B"}]}', InsightList)
        assert parsed.insights[0].title == "A"

    def test_parse_structured_schema_mismatch(self):
        with pytest.raises(ValidationError):
            parse_structured('{"value": "not a number"}', Answer)

    def test_parse_structured_no_json(self):
        with pytest.raises(ValidationError, match="No JSON"):
            parse_structured("sorry", Answer)


class TestCreateClient:
    """Test provider selection from configuration."""

    def _settings(self, env):
        with patch.dict(os.environ, env, clear=True):
            return SimpleNamespace(llm=LLMConfig(_env_file=None))

    def test_no_keys(self):
        with pytest.raises(ValueError, match="No LLM API key"):
            create_llm_client(settings=self._settings({}))

    def test_claude_selected_from_key(self):
        client = create_llm_client(settings=self._settings({"ANTHROPIC_API_KEY": "k", "MAX_RETRIES": "2"}))
        assert isinstance(client.provider, ClaudeLLMProvider)
        assert client.provider.api_key == "k"
        assert client.max_retries == 2

    def test_gemini_preferred(self):
        with patch("utils.llm.GeminiLLMProvider") as gemini:
            create_llm_client(settings=self._settings({"GEMINI_API_KEY": "g", "ANTHROPIC_API_KEY": "k"}))
        assert gemini.call_args.kwargs["api_key"] == "g"

    def test_model_override(self):
        client = create_llm_client(settings=self._settings({
            "ANTHROPIC_API_KEY": "k",
            "LLM_MODEL": "claude-3-haiku-20240307"
        }))
        assert client.provider.model == "claude-3-haiku-20240307"

    def test_explicit_provider_without_key(self):
        with pytest.raises(ValueError, match="API key required"):
            create_llm_client(provider_type="claude", settings=self._settings({}))

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            create_llm_client(provider_type="other", api_key="x", settings=self._settings({}))
