"""
Insight agent for the analysis step.

Sends a compact JSON summary of the AnalysisData report to the text-generation
service and attaches the returned insights. The report itself is complete
without insights; when the service fails after its retries, a single fallback
insight is attached instead of an error.
"""

import json
from typing import List

from agents.base import AgentResult, BaseAgent
from models import AnalysisData, Insight, InsightList


FALLBACK_INSIGHT = Insight(
    title="Error generating insights",
    text=(
        "The text-generation service could not be reached. "
        "Check the network connection or the API key."
    ),
)


class InsightAgent(BaseAgent):
    """Generates titled insights for an analysis report."""

    @property
    def role_description(self) -> str:
        return "Summarize aggregated school assessment data into key, actionable insights"

    async def generate_insights(self, analysis: AnalysisData) -> List[Insight]:
        """Return generated insights, or the fallback entry when generation fails or is empty."""
        payload = json.dumps(analysis.insight_payload(), indent=2, ensure_ascii=False)
        return await self.generate_or_fallback(
            "analysis_insights",
            {"analysis_json": payload},
            InsightList,
            fallback=[FALLBACK_INSIGHT],
            extract=lambda result: list(result.insights),
        )

    async def execute(self, analysis: AnalysisData) -> AgentResult:
        """Attach insights to the analysis report."""
        insights = await self.generate_insights(analysis)

        return AgentResult(
            success=True,
            data={"analysis": analysis.with_insights(insights)},
            agent_id=self.agent_id,
            metadata={
                "insight_count": len(insights),
                "fallback_used": insights == [FALLBACK_INSIGHT],
            }
        )
