"""
Shared fixtures for MTSS planner tests.

Provides school record factories and a stub LLM provider so agent and
wizard tests never touch the network.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Type

import pytest
from pydantic import BaseModel

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models import HEATMAP_FIELDS, FieldKey, SchoolRecord
from utils.llm import APIError, LLMClient, LLMProvider, LLMRequest, LLMResponse


def make_school(school_id: int, score=None, students: str = "", name: Optional[str] = None, **kwargs) -> SchoolRecord:
    """School with every heatmap field set to `score` (None leaves them blank)."""
    scores = {} if score is None else {field: str(score) for field in HEATMAP_FIELDS}
    scores.update(kwargs.pop("scores", {}))
    return SchoolRecord(
        id=school_id,
        name=name if name is not None else f"School {school_id}",
        students=students,
        scores=scores,
        **kwargs
    )


class StubProvider(LLMProvider):
    """Returns canned structured responses keyed by response format; can fail first N calls."""

    def __init__(self, responses: Optional[Dict[Type[BaseModel], BaseModel]] = None, failures: int = 0):
        self.responses = responses or {}
        self.failures = failures
        self.requests: List[LLMRequest] = []

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        if self.failures > 0:
            self.failures -= 1
            raise APIError("service unavailable")

        parsed = self.responses.get(request.response_format)
        content = parsed.model_dump_json() if parsed is not None else ""
        return LLMResponse(content=content, parsed_data=parsed, latency_ms=1.0)


class FailingProvider(LLMProvider):
    """Always fails."""

    def __init__(self):
        self.calls = 0

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        self.calls += 1
        raise APIError("service unavailable")


@pytest.fixture
def all_fives():
    return make_school(1, score=5, name="Alpha")


@pytest.fixture
def all_ones():
    return make_school(2, score=1, name="Beta")


@pytest.fixture
def failing_client():
    """LLM client that exhausts its retries immediately."""
    return LLMClient(provider=FailingProvider(), max_retries=3, retry_delay=0.0)


@pytest.fixture
def first_field() -> FieldKey:
    return HEATMAP_FIELDS[0]
