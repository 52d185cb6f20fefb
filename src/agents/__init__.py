"""Agent implementations and base classes"""

from .base import BaseAgent, AgentConfig, AgentResult
from .insights import InsightAgent, FALLBACK_INSIGHT
from .issues import IssueAgent, derive_root_causes, finalize_issue
from .plan import PlanAgent, seed_plan

__all__ = [
    "BaseAgent",
    "AgentConfig",
    "AgentResult",
    "InsightAgent",
    "FALLBACK_INSIGHT",
    "IssueAgent",
    "derive_root_causes",
    "finalize_issue",
    "PlanAgent",
    "seed_plan",
]
