"""
Tests for the wizard session.
"""

import pytest

from agents import FALLBACK_INSIGHT
from models import (
    FieldKey,
    GeneratedIssue,
    InsightList,
    Insight,
    IssueSuggestions,
    PlanSuggestions,
    Tier,
)
from orchestration import WizardSession, WizardStage, WizardStateError
from utils.llm import LLMClient
from conftest import StubProvider


ISSUE = GeneratedIssue(
    title="Attendance",
    action="reduce",
    subject="chronic absenteeism",
    context="with an early-warning team",
    result="keep students engaged",
    vision="Every student attends and belongs",
    rationale="Attendance is the lowest area",
    level="system (organization)",
)


@pytest.fixture
def session():
    provider = StubProvider(responses={
        InsightList: InsightList(insights=[Insight(title="Attendance", text="Absences are rising.")]),
        IssueSuggestions: IssueSuggestions(issues=[ISSUE]),
        PlanSuggestions: PlanSuggestions(main_goal="Cut absenteeism", smart_objectives=["By June, ..."]),
    })
    return WizardSession(llm_client=LLMClient(provider=provider, max_retries=0, retry_delay=0.0))


class TestStages:
    """Test stage navigation."""

    def test_bounded_navigation(self, session):
        assert session.stage == WizardStage.MAPPING
        assert session.previous_stage() == WizardStage.MAPPING
        for _ in range(5):
            session.next_stage()
        assert session.stage == WizardStage.INTERVENTION_PLAN
        assert session.stage_title == "Stage 4: Intervention and support plan"


class TestMapping:
    """Test school mapping operations."""

    def test_add_assigns_sequential_ids(self, session):
        first = session.add_school(name="Oak")
        second = session.add_school()
        assert (first.id, second.id) == (1, 2)

    def test_edit_school(self, session):
        school = session.add_school(name="Oak")
        session.update_school(school.id, students=420, principal="M. Katz")
        session.set_score(school.id, FieldKey.MATH, 2)
        session.toggle_challenge(school.id, FieldKey.MATH, 1)
        session.toggle_challenge(school.id, FieldKey.VISION, 0)
        session.toggle_challenge(school.id, FieldKey.VISION, 0)

        updated = session.get_school(school.id)
        assert updated.students == "420"
        assert updated.principal == "M. Katz"
        assert updated.score(FieldKey.MATH) == "2"
        assert updated.selected_challenges(FieldKey.MATH) == {1}
        assert updated.selected_challenges(FieldKey.VISION) == frozenset()

    def test_id_is_not_editable(self, session):
        school = session.add_school(name="Oak")
        with pytest.raises(ValueError):
            session.update_school(school.id, id=7)
        with pytest.raises(ValueError):
            session.update_school(school.id, name="Elm", scores={})

        assert [s.id for s in session.schools] == [school.id]
        assert session.get_school(school.id).name == "Oak"

    def test_unknown_school(self, session):
        with pytest.raises(KeyError):
            session.set_score(99, FieldKey.MATH, 3)

    def test_remove_and_clear(self, session):
        session.add_school()
        second = session.add_school()
        session.remove_school(1)
        assert [s.id for s in session.schools] == [second.id]

        session.clear_schools()
        assert session.schools == []
        assert session.add_school().id == 1


class TestFlow:
    """Test the full analysis, issue and plan flow."""

    @pytest.mark.asyncio
    async def test_stages_require_analysis(self, session):
        with pytest.raises(WizardStateError):
            await session.suggest_issues()
        with pytest.raises(WizardStateError):
            session.define_issue(ISSUE)
        with pytest.raises(WizardStateError):
            await session.build_plan()

    @pytest.mark.asyncio
    async def test_full_flow(self, session):
        school = session.add_school(name="Oak", scores={field: "1" for field in FieldKey})
        session.add_school(name="Pine", scores={field: "5" for field in FieldKey})

        analysis = await session.run_analysis()
        assert analysis.summary.total_schools == 2
        assert analysis.schools[0].tier == Tier.INTENSIVE
        assert analysis.insights[0].title == "Attendance"

        issues = await session.suggest_issues()
        assert issues == [ISSUE]
        assert "Absences are rising." in session.root_causes

        final = session.define_issue(issues[0].model_copy(update={"action": "halve"}))
        assert final.action == "halve"
        assert final.original_challenge == "Attendance"

        plan = await session.build_plan()
        assert plan.main_goal == "Cut absenteeism"
        assert plan.smart_objectives == ["By June, ..."]
        assert school.id == 1

    @pytest.mark.asyncio
    async def test_analysis_without_insights(self, session):
        session.add_school()
        analysis = await session.run_analysis(with_insights=False)
        assert analysis.insights == ()

    @pytest.mark.asyncio
    async def test_analysis_kept_when_generation_fails(self, failing_client):
        session = WizardSession(llm_client=failing_client)
        session.add_school(name="Oak")

        analysis = await session.run_analysis()

        assert analysis.summary.total_schools == 1
        assert analysis.insights == (FALLBACK_INSIGHT,)
        assert await session.suggest_issues() == []

    def test_reset(self, session):
        session.add_school()
        session.next_stage()
        session.reset()
        assert session.stage == WizardStage.MAPPING
        assert session.schools == []
        assert session.analysis is None
