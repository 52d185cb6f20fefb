"""Base class for the wizard's text-generation agents."""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, Field

from utils.llm import LLMClient, LLMError
from agents.templates import TemplateManager, get_template_manager


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Failures that degrade a wizard step to its fallback value
GENERATION_ERRORS = (LLMError, ValueError, KeyError, FileNotFoundError)


@dataclass
class AgentMetrics:
    """Counters for one agent instance."""
    llm_calls: int = 0
    fallbacks: int = 0
    latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        return self.latency_ms / self.llm_calls if self.llm_calls else 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "llm_calls": self.llm_calls,
            "fallbacks": self.fallbacks,
            "latency_ms": self.latency_ms,
            "avg_latency_ms": self.avg_latency_ms,
        }


@dataclass
class AgentConfig:
    """Generation settings shared by a step's calls."""
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4096
    llm_retry_count: Optional[int] = None  # None uses the client's max_retries
    template_loader: Optional[str] = None
    enable_metrics: bool = True


class AgentResult(BaseModel):
    """Outcome of one agent run."""
    success: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    agent_id: str
    execution_time_ms: float = 0.0
    metrics: Optional[Dict[str, Any]] = None


class BaseAgent(ABC):
    """
    A wizard step that asks the text-generation service for structured output.

    Subclasses render one of the prompt templates, validate the reply against
    a pydantic model and fall back to a fixed value when generation fails.
    Without an LLMClient every generation falls back.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        agent_id: Optional[str] = None,
        config: Optional[AgentConfig] = None,
        template_manager: Optional[TemplateManager] = None
    ):
        self.llm_client = llm_client
        self.agent_id = agent_id or f"{self.agent_type}_{uuid.uuid4().hex[:8]}"
        self.config = config or AgentConfig()
        self.template_manager = template_manager or get_template_manager()
        self.metrics = AgentMetrics() if self.config.enable_metrics else None
        self.logger = logging.getLogger(f"{__name__}.{self.agent_type}")

    @property
    def agent_type(self) -> str:
        return self.__class__.__name__

    @property
    @abstractmethod
    def role_description(self) -> str:
        """One-line description of what this step generates."""
        pass

    @abstractmethod
    async def execute(self, **kwargs) -> AgentResult:
        pass

    async def generate(
        self,
        template_name: str,
        variables: Dict[str, Any],
        response_format: Type[T]
    ) -> T:
        """
        Render a template and return the validated structured reply.

        Raises:
            LLMError: no client is configured or the call failed after retries
            ValueError: the template could not be rendered
        """
        if self.llm_client is None:
            raise LLMError("No LLM client configured")

        prompt = await self.template_manager.render_template(
            template_name,
            {"role_description": self.role_description, **variables},
            loader_name=self.config.template_loader,
        )

        start_time = time.perf_counter()
        try:
            return await self.llm_client.call(
                prompt=prompt,
                response_format=response_format,
                temperature=self.config.llm_temperature,
                max_tokens=self.config.llm_max_tokens,
                retry_count=self.config.llm_retry_count,
                metadata={"agent_id": self.agent_id, "template_name": template_name},
            )
        finally:
            if self.metrics:
                self.metrics.llm_calls += 1
                self.metrics.latency_ms += (time.perf_counter() - start_time) * 1000

    async def generate_or_fallback(
        self,
        template_name: str,
        variables: Dict[str, Any],
        response_format: Type[T],
        fallback: Any,
        extract: Callable[[T], Any] = lambda result: result
    ) -> Any:
        """
        Like generate(), but return `fallback` on failure.

        `extract` pulls the step's value out of the reply; an empty value also
        yields the fallback.
        """
        try:
            value = extract(await self.generate(template_name, variables, response_format))
        except GENERATION_ERRORS as e:
            self.logger.warning(f"{template_name} generation failed, using fallback: {e}", extra={
                "agent_id": self.agent_id,
                "error_type": type(e).__name__,
            })
            value = None

        if not value:
            if self.metrics:
                self.metrics.fallbacks += 1
            return fallback
        return value

    async def run(self, **kwargs) -> AgentResult:
        """Execute the step, timing it and turning unexpected errors into a failed result."""
        start_time = time.perf_counter()
        try:
            result = await self.execute(**kwargs)
        except Exception as e:
            self.logger.error(f"{self.agent_type} failed: {e}", extra={"agent_id": self.agent_id})
            result = AgentResult(
                success=False,
                error=str(e),
                agent_id=self.agent_id,
                metadata={"error_type": type(e).__name__},
            )

        result.execution_time_ms = (time.perf_counter() - start_time) * 1000
        result.metrics = self.metrics.as_dict() if self.metrics else None
        return result

    def __repr__(self) -> str:
        return f"{self.agent_type}(agent_id='{self.agent_id}')"
