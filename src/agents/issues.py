"""
Issue agent for the issue-definition step.

Derives candidate root causes from the analysis report, asks the
text-generation service to reframe them as central issues, and turns the
supervisor's chosen issue into a FinalIssue.
"""

from typing import List, Optional

from agents.base import AgentResult, BaseAgent
from models import AnalysisData, FinalIssue, GeneratedIssue, IssueSuggestions


LOW_AREA_THRESHOLD = 30  # heatmap percentage
TIER3_SHARE_THRESHOLD = 0.2
MAX_ROOT_CAUSES = 3
DEFAULT_ROOT_CAUSE = (
    "No central challenges were detected automatically. "
    "Performance may be high across all areas."
)
DEFAULT_ORIGINAL_CHALLENGE = "General challenge"


def derive_root_causes(analysis: AnalysisData) -> List[str]:
    """Candidate root causes, at most three, from the heatmap, tier 3 share and insights."""
    causes = []

    if analysis.heatmap_data:
        lowest_area = max(analysis.heatmap_data, key=lambda row: row.percentage)
        if lowest_area.percentage > LOW_AREA_THRESHOLD:
            causes.append(
                f'Consistently low performance in "{lowest_area.label}", with '
                f"{lowest_area.percentage}% of schools rated low."
            )

    tier3_count = len(analysis.mtss_classification.tier3)
    total = analysis.summary.total_schools
    if tier3_count > 0 and tier3_count / total > TIER3_SHARE_THRESHOLD:
        causes.append(
            f"High concentration ({tier3_count} schools) in the intensive intervention "
            f"tier (Tier 3), pointing to a deep systemic challenge."
        )

    for insight in analysis.insights:
        if "error" not in insight.title.lower():
            causes.append(insight.text)

    if not causes:
        causes.append(DEFAULT_ROOT_CAUSE)

    return causes[:MAX_ROOT_CAUSES]


def finalize_issue(
    issue: GeneratedIssue,
    analysis: AnalysisData,
    root_causes: List[str]
) -> FinalIssue:
    """Combine the chosen (possibly edited) issue with its originating context."""
    original = analysis.insights[0].title if analysis.insights else DEFAULT_ORIGINAL_CHALLENGE
    return FinalIssue(
        **issue.model_dump(),
        original_challenge=original,
        root_causes=list(root_causes),
    )


class IssueAgent(BaseAgent):
    """Suggests central issues for a set of root causes."""

    @property
    def role_description(self) -> str:
        return "Reframe root causes of school challenges into actionable central issues"

    async def suggest_issues(self, root_causes: List[str]) -> List[GeneratedIssue]:
        """Suggested issues; an empty list when there are no causes or the service fails."""
        if not root_causes:
            return []

        return await self.generate_or_fallback(
            "issue_suggestions",
            {"root_causes": "\n".join(f"- {cause}" for cause in root_causes)},
            IssueSuggestions,
            fallback=[],
            extract=lambda result: list(result.issues),
        )

    async def execute(
        self,
        analysis: AnalysisData,
        root_causes: Optional[List[str]] = None
    ) -> AgentResult:
        causes = root_causes if root_causes is not None else derive_root_causes(analysis)
        issues = await self.suggest_issues(causes)

        return AgentResult(
            success=True,
            data={"root_causes": causes, "issues": issues},
            agent_id=self.agent_id,
            metadata={"issue_count": len(issues)}
        )
