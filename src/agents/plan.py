"""Plan agent: main goal and SMART objectives for the chosen central issue."""

from typing import Optional

from agents.base import AgentResult, BaseAgent
from models import FinalIssue, InterventionPlan, PlanSuggestions


def seed_plan(suggestions: PlanSuggestions, plan: Optional[InterventionPlan] = None) -> InterventionPlan:
    """Apply suggestions to a plan only when both a goal and objectives came back."""
    plan = plan or InterventionPlan()
    if suggestions.main_goal and suggestions.smart_objectives:
        return plan.model_copy(update={
            "main_goal": suggestions.main_goal,
            "smart_objectives": list(suggestions.smart_objectives),
        })
    return plan


class PlanAgent(BaseAgent):
    """Drafts intervention plan goals for a final issue."""

    @property
    def role_description(self) -> str:
        return "Draft a main goal and SMART objectives for an MTSS intervention plan"

    async def suggest_plan(self, final_issue: FinalIssue) -> PlanSuggestions:
        """Plan suggestions; empty suggestions when the service fails."""
        return await self.generate_or_fallback(
            "plan_suggestions",
            {
                "issue_question": final_issue.as_question(),
                "vision": final_issue.vision,
            },
            PlanSuggestions,
            fallback=PlanSuggestions(),
        )

    async def execute(self, final_issue: FinalIssue) -> AgentResult:
        suggestions = await self.suggest_plan(final_issue)
        plan = seed_plan(suggestions)

        return AgentResult(
            success=True,
            data={"suggestions": suggestions, "plan": plan},
            agent_id=self.agent_id,
            metadata={"seeded": bool(plan.main_goal)}
        )
