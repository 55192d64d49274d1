"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Stage model + qualifying side effect                          ║
║                                                                              ║
║  1. The three stage sets, in display order                                   ║
║  2. Labels / colours / unknown-stage fallback                                ║
║  3. auto-enrich fires iff old != qualifying AND new == qualifying            ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import itertools

import pytest

from models.pipeline import (
    PipelineType,
    get_stage,
    is_valid_stage,
    stage_label,
    stage_values,
)
from services.stage_transitions import on_pipeline_stage_change, should_trigger_enrichment


class TestStageSets:

    def test_staff_order(self):
        assert stage_values(PipelineType.STAFF) == [
            "new", "qualifying", "qualified", "match_ready", "matched", "purchased",
        ]

    def test_client_order(self):
        assert stage_values(PipelineType.CLIENT) == [
            "new_recruit", "hot_recruit", "booked_appt", "nurture", "hired", "dead",
        ]

    def test_ai_recruiter_order(self):
        assert stage_values(PipelineType.AI_RECRUITER) == [
            "new_lead", "contacted", "interested", "appointment_set", "hired", "dead",
        ]

    def test_sets_are_closed(self):
        assert is_valid_stage(PipelineType.STAFF, "qualifying")
        assert not is_valid_stage(PipelineType.STAFF, "new_recruit")
        assert not is_valid_stage(PipelineType.AI_RECRUITER, "qualifying")

    def test_every_stage_has_label_and_colour(self):
        for pipeline in PipelineType:
            for value in stage_values(pipeline):
                stage = get_stage(pipeline, value)
                assert stage.label
                assert stage.color.startswith("bg-")

    def test_label_lookup(self):
        assert stage_label(PipelineType.STAFF, "match_ready") == "Match Ready"
        assert stage_label(PipelineType.AI_RECRUITER, "appointment_set") == "Appointment Set"

    def test_unknown_stage_label_falls_back_to_key(self):
        assert stage_label(PipelineType.STAFF, "archived") == "archived"

    def test_pipeline_type_from_string(self):
        assert stage_values("staff") == stage_values(PipelineType.STAFF)


class TestQualifyingTrigger:

    def test_fires_only_on_edge_into_qualifying(self):
        """Exhaustive over all staff stages + None"""
        stages = stage_values(PipelineType.STAFF) + [None]
        for old, new in itertools.product(stages, stages):
            expected = old != "qualifying" and new == "qualifying"
            assert should_trigger_enrichment(old, new) is expected, (old, new)

    def test_qualifying_to_qualifying_is_noop(self):
        assert should_trigger_enrichment("qualifying", "qualifying") is False

    @pytest.mark.asyncio
    async def test_side_effect_sends_one_call(self, rpc):
        fired = on_pipeline_stage_change("pro-1", "new", "qualifying")
        await rpc.gateway.drain()

        assert fired is True
        assert rpc.calls_to("auto-enrich-trigger") == [{"type": "lead_qualifying", "record_id": "pro-1"}]

    @pytest.mark.asyncio
    async def test_no_call_when_leaving_qualifying(self, rpc):
        fired = on_pipeline_stage_change("pro-1", "qualifying", "qualified")
        await rpc.gateway.drain()

        assert fired is False
        assert rpc.calls == []

    @pytest.mark.asyncio
    async def test_remote_failure_is_swallowed(self, rpc):
        """The trigger is fire-and-forget: a 500 never reaches the caller"""
        rpc.respond("auto-enrich-trigger", {"error": "boom"}, status=500)

        assert on_pipeline_stage_change("pro-1", "new", "qualifying") is True
        await rpc.gateway.drain()

        assert len(rpc.calls_to("auto-enrich-trigger")) == 1
        assert rpc.gateway.pending_count == 0
