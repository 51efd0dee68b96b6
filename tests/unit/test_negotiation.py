# tests/unit/test_negotiation.py
"""Tests for the feasibility negotiation state machine and its driver."""

import asyncio

import pytest

from daymap.errors import GenerationFailure, InvalidTransition, NegotiationBusy
from daymap.planning.negotiation import (
    ApplyOption,
    CheckFeasibility,
    FeasibilityChecked,
    FeasibilityCheckFailed,
    FeasibilityNegotiation,
    GenerateRoadmap,
    GenerationFailed,
    Negotiation,
    NegotiationState,
    ReportFailure,
    Revise,
    Submit,
    apply_option,
    transition,
)
from daymap.planning.schemas import FeasibilityOption, FeasibilityResult


class TestTransition:
    def test_submit_checks_feasibility(self, draft):
        snapshot, effect = transition(Negotiation(draft=draft), Submit())
        assert snapshot.state is NegotiationState.CHECKING_FEASIBILITY
        assert effect == CheckFeasibility(draft)

    def test_feasible_goes_to_generating(self, draft):
        checking = Negotiation(draft=draft, state=NegotiationState.CHECKING_FEASIBILITY)
        snapshot, effect = transition(checking, FeasibilityChecked(FeasibilityResult(is_feasible=True)))
        assert snapshot.state is NegotiationState.GENERATING
        assert effect == GenerateRoadmap(draft)

    def test_infeasible_presents_options(self, draft, infeasible_result):
        checking = Negotiation(draft=draft, state=NegotiationState.CHECKING_FEASIBILITY)
        snapshot, effect = transition(checking, FeasibilityChecked(infeasible_result))
        assert snapshot.state is NegotiationState.PRESENTING_OPTIONS
        assert snapshot.feasibility is infeasible_result
        assert effect is None

    def test_check_failure_treated_as_feasible(self, draft):
        checking = Negotiation(draft=draft, state=NegotiationState.CHECKING_FEASIBILITY)
        snapshot, effect = transition(checking, FeasibilityCheckFailed("timeout"))
        assert snapshot.state is NegotiationState.GENERATING
        assert isinstance(effect, GenerateRoadmap)

    def test_generation_failure_returns_to_drafting(self, draft):
        generating = Negotiation(draft=draft, state=NegotiationState.GENERATING)
        snapshot, effect = transition(generating, GenerationFailed("bad json"))
        assert snapshot.state is NegotiationState.DRAFTING
        assert snapshot.error == "bad json"
        assert snapshot.draft == draft
        assert effect == ReportFailure("bad json")

    def test_revise_from_options(self, draft, infeasible_result):
        presenting = Negotiation(
            draft=draft, state=NegotiationState.PRESENTING_OPTIONS, feasibility=infeasible_result
        )
        snapshot, effect = transition(presenting, Revise({"daily_work_time": 4.0}))
        assert snapshot.state is NegotiationState.DRAFTING
        assert snapshot.feasibility is None
        assert snapshot.draft.daily_work_time == 4.0
        assert effect is None

    def test_disallowed_event(self, draft, infeasible_result):
        with pytest.raises(InvalidTransition):
            transition(Negotiation(draft=draft), ApplyOption(infeasible_result.options[0]))
        with pytest.raises(InvalidTransition):
            transition(Negotiation(draft=draft, state=NegotiationState.MATERIALIZED), Submit())


class TestApplyOption:
    def test_hours_changes_only_daily_work_time(self, draft, infeasible_result):
        updated = apply_option(draft, infeasible_result.options[0])
        assert updated.daily_work_time == 5.0
        assert updated.model_dump(exclude={"daily_work_time"}) == draft.model_dump(
            exclude={"daily_work_time"}
        )

    def test_deadline_changes_end_date(self, draft, infeasible_result):
        assert apply_option(draft, infeasible_result.options[1]).end_date == "2024-01-10"

    def test_goal_changes_goal(self, draft, infeasible_result):
        assert apply_option(draft, infeasible_result.options[2]).goal == "Print hello"

    def test_invalid_deadline_rejected(self, draft):
        option = FeasibilityOption(type="deadline", suggested_value="next week")
        with pytest.raises(ValueError):
            apply_option(draft, option)


class TestFeasibilityNegotiation:
    @pytest.mark.asyncio
    async def test_feasible_draft_materializes(self, draft, service, id_factory):
        negotiation = FeasibilityNegotiation(draft, service, id_factory=id_factory)
        snapshot = await negotiation.submit()

        assert snapshot.state is NegotiationState.MATERIALIZED
        assert snapshot.project.id == "id1"
        assert len(snapshot.project.tasks) == 3
        service.check_feasibility.assert_awaited_once()
        service.generate_roadmap.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_infeasible_then_apply_option_skips_recheck(self, draft, service, infeasible_result):
        service.check_feasibility.return_value = infeasible_result
        negotiation = FeasibilityNegotiation(draft, service)

        snapshot = await negotiation.submit()
        assert snapshot.state is NegotiationState.PRESENTING_OPTIONS
        service.generate_roadmap.assert_not_awaited()

        snapshot = await negotiation.apply_option(infeasible_result.options[0])
        assert snapshot.state is NegotiationState.MATERIALIZED
        assert snapshot.project.daily_work_time == 5.0
        assert service.check_feasibility.await_count == 1
        generated_draft = service.generate_roadmap.await_args.args[0]
        assert generated_draft.daily_work_time == 5.0

    @pytest.mark.asyncio
    async def test_feasibility_error_proceeds(self, draft, service):
        service.check_feasibility.side_effect = RuntimeError("connection refused")
        snapshot = await FeasibilityNegotiation(draft, service).submit()
        assert snapshot.state is NegotiationState.MATERIALIZED

    @pytest.mark.asyncio
    async def test_generation_failure_preserves_draft(self, draft, service):
        service.generate_roadmap.side_effect = GenerationFailure("no tasks")
        negotiation = FeasibilityNegotiation(draft, service)

        with pytest.raises(GenerationFailure):
            await negotiation.submit()

        assert negotiation.state is NegotiationState.DRAFTING
        assert negotiation.draft == draft
        assert "no tasks" in negotiation.error

        # retry with the same draft
        service.generate_roadmap.side_effect = None
        snapshot = await negotiation.submit()
        assert snapshot.state is NegotiationState.MATERIALIZED
        assert snapshot.error is None

    @pytest.mark.asyncio
    async def test_bad_option_leaves_options_pending(self, draft, service, infeasible_result):
        service.check_feasibility.return_value = infeasible_result
        negotiation = FeasibilityNegotiation(draft, service)
        await negotiation.submit()

        with pytest.raises(ValueError):
            await negotiation.apply_option(FeasibilityOption(type="hours", suggested_value="lots"))
        assert negotiation.state is NegotiationState.PRESENTING_OPTIONS

    @pytest.mark.asyncio
    async def test_reentry_while_busy(self, draft, service):
        gate = asyncio.Event()

        async def slow_check(*args):
            await gate.wait()
            return FeasibilityResult(is_feasible=True)

        service.check_feasibility.side_effect = slow_check
        negotiation = FeasibilityNegotiation(draft, service)

        pending = asyncio.create_task(negotiation.submit())
        await asyncio.sleep(0)
        assert negotiation.busy

        with pytest.raises(NegotiationBusy):
            await negotiation.submit()
        with pytest.raises(NegotiationBusy):
            negotiation.revise(goal="other")

        gate.set()
        snapshot = await pending
        assert snapshot.state is NegotiationState.MATERIALIZED

    @pytest.mark.asyncio
    async def test_cancelled_generation_restores_options(self, draft, service, infeasible_result, two_day_plan):
        service.check_feasibility.return_value = infeasible_result
        negotiation = FeasibilityNegotiation(draft, service)
        await negotiation.submit()

        async def hanging_generate(*args):
            await asyncio.Event().wait()

        service.generate_roadmap.side_effect = hanging_generate
        pending = asyncio.create_task(negotiation.apply_option(infeasible_result.options[0]))
        await asyncio.sleep(0)
        assert negotiation.state is NegotiationState.GENERATING

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        assert negotiation.state is NegotiationState.PRESENTING_OPTIONS
        assert negotiation.draft == draft

        service.generate_roadmap.side_effect = None
        service.generate_roadmap.return_value = two_day_plan
        snapshot = await negotiation.apply_option(infeasible_result.options[1])
        assert snapshot.state is NegotiationState.MATERIALIZED
        assert snapshot.project.end_date == "2024-01-10"

    @pytest.mark.asyncio
    async def test_attachments_forwarded(self, draft, service):
        from daymap.planning.schemas import Attachment

        attachment = Attachment(name="notes.txt", data="aGVsbG8=", mime_type="text/plain")
        await FeasibilityNegotiation(draft, service, attachments=[attachment]).submit()
        assert service.generate_roadmap.await_args.args[1] == [attachment]
