"""
Wizard session coordinating the four planning stages.

Mapping → Analysis → Issue definition → Intervention plan. The session owns the
mapped school list and each stage's result; text generation is delegated to
agents built around an injected LLMClient.
"""

import logging
from enum import IntEnum
from typing import Any, List, Optional

from agents import InsightAgent, IssueAgent, PlanAgent, derive_root_causes, finalize_issue, seed_plan
from analysis import analyze_schools
from models import (
    AnalysisData,
    FieldKey,
    FinalIssue,
    GeneratedIssue,
    InterventionPlan,
    PlanSuggestions,
    SchoolRecord,
)
from utils.llm import LLMClient


logger = logging.getLogger(__name__)


class WizardStage(IntEnum):
    MAPPING = 0
    ANALYSIS = 1
    ISSUE_DEFINITION = 2
    INTERVENTION_PLAN = 3


STAGE_TITLES = {
    WizardStage.MAPPING: "Stage 1: School mapping",
    WizardStage.ANALYSIS: "Stage 2: Data analysis",
    WizardStage.ISSUE_DEFINITION: "Stage 3: Central issue definition",
    WizardStage.INTERVENTION_PLAN: "Stage 4: Intervention and support plan",
}


class WizardStateError(Exception):
    """Raised when a stage is run before the stages it depends on."""
    pass


class WizardSession:
    """State of one supervisor's planning session."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        insight_agent: Optional[InsightAgent] = None,
        issue_agent: Optional[IssueAgent] = None,
        plan_agent: Optional[PlanAgent] = None
    ):
        self.insight_agent = insight_agent or InsightAgent(llm_client=llm_client)
        self.issue_agent = issue_agent or IssueAgent(llm_client=llm_client)
        self.plan_agent = plan_agent or PlanAgent(llm_client=llm_client)
        self.reset()

    def reset(self):
        """Discard all data and return to the mapping stage."""
        self.stage = WizardStage.MAPPING
        self.schools: List[SchoolRecord] = []
        self.next_id = 1
        self.analysis: Optional[AnalysisData] = None
        self.root_causes: List[str] = []
        self.issue_suggestions: List[GeneratedIssue] = []
        self.final_issue: Optional[FinalIssue] = None
        self.plan_suggestions: Optional[PlanSuggestions] = None
        self.intervention_plan: Optional[InterventionPlan] = None

    @property
    def stage_title(self) -> str:
        return STAGE_TITLES[self.stage]

    def next_stage(self) -> WizardStage:
        if self.stage < WizardStage.INTERVENTION_PLAN:
            self.stage = WizardStage(self.stage + 1)
        return self.stage

    def previous_stage(self) -> WizardStage:
        if self.stage > WizardStage.MAPPING:
            self.stage = WizardStage(self.stage - 1)
        return self.stage

    # School mapping

    def add_school(self, **fields: Any) -> SchoolRecord:
        """Append a new blank (or partially filled) school with the next free id."""
        school = SchoolRecord(id=self.next_id, **fields)
        self.schools.append(school)
        self.next_id += 1
        return school

    def _index_of(self, school_id: int) -> int:
        for index, school in enumerate(self.schools):
            if school.id == school_id:
                return index
        raise KeyError(f"No school with id {school_id}")

    def get_school(self, school_id: int) -> SchoolRecord:
        return self.schools[self._index_of(school_id)]

    def update_school(self, school_id: int, **fields: Any) -> SchoolRecord:
        """
        Replace top-level fields of a school (name, principal, students, notes).

        Raises:
            KeyError: no school has this id
            ValueError: a field other than the editable ones was given
        """
        index = self._index_of(school_id)
        updated = self.schools[index].with_fields(**fields)
        self.schools[index] = updated
        return updated

    def set_score(self, school_id: int, field: FieldKey, value: Any) -> SchoolRecord:
        index = self._index_of(school_id)
        self.schools[index] = self.schools[index].with_score(field, value)
        return self.schools[index]

    def toggle_challenge(self, school_id: int, field: FieldKey, challenge_index: int) -> SchoolRecord:
        index = self._index_of(school_id)
        self.schools[index] = self.schools[index].with_challenge_toggled(field, challenge_index)
        return self.schools[index]

    def remove_school(self, school_id: int) -> SchoolRecord:
        return self.schools.pop(self._index_of(school_id))

    def clear_schools(self):
        """Remove every school and restart id numbering."""
        self.schools = []
        self.next_id = 1

    # Derived stages

    async def run_analysis(self, with_insights: bool = True) -> AnalysisData:
        """
        Analyse the mapped schools and attach generated insights.

        The engine result is stored before insights are requested, so a
        usable report exists even while generation is pending or failing.
        """
        self.analysis = analyze_schools(self.schools)

        if with_insights:
            insights = await self.insight_agent.generate_insights(self.analysis)
            self.analysis = self.analysis.with_insights(insights)

        logger.info("Analysis stage finished", extra={
            "schools": self.analysis.summary.total_schools,
            "insights": len(self.analysis.insights),
        })
        return self.analysis

    async def suggest_issues(self) -> List[GeneratedIssue]:
        if self.analysis is None:
            raise WizardStateError("Complete the analysis stage first")

        self.root_causes = derive_root_causes(self.analysis)
        self.issue_suggestions = await self.issue_agent.suggest_issues(self.root_causes)
        return self.issue_suggestions

    def define_issue(self, issue: GeneratedIssue) -> FinalIssue:
        """Finalize the chosen (and possibly edited) issue."""
        if self.analysis is None:
            raise WizardStateError("Complete the analysis stage first")

        root_causes = self.root_causes or derive_root_causes(self.analysis)
        self.final_issue = finalize_issue(issue, self.analysis, root_causes)
        return self.final_issue

    async def build_plan(self) -> InterventionPlan:
        if self.analysis is None or self.final_issue is None:
            raise WizardStateError("Complete the previous stages first")

        self.plan_suggestions = await self.plan_agent.suggest_plan(self.final_issue)
        self.intervention_plan = seed_plan(self.plan_suggestions, self.intervention_plan)
        return self.intervention_plan
