"""Unit tests for the suggestion merge engine."""

import asyncio

import pytest

from models.production import AssetState, SceneSuggestion
from movie_agent.suggestions import SuggestionMergeEngine


def make_suggestion(position: int, title: str = "A Moment of Doubt") -> SceneSuggestion:
    return SceneSuggestion(
        title=title,
        reasoning="Adds emotional depth",
        scene_description=f"Inserted at {position}",
        suggested_position=position,
    )


@pytest.fixture
def engine(review_context, fake_service) -> SuggestionMergeEngine:
    return SuggestionMergeEngine(review_context, fake_service)


class TestAccept:
    @pytest.mark.asyncio
    async def test_insert_at_position_three(self, engine, review_context):
        """Test accepting a suggestion at position three."""
        suggestion = make_suggestion(3)
        review_context.suggestions = [suggestion]
        old_third = review_context.document.scenes[2]

        scene = await engine.accept(suggestion.id)

        scenes = review_context.document.scenes
        assert len(scenes) == 5
        assert scenes[2] is scene
        assert scene.scene_number == 3
        assert old_third.scene_number == 4
        assert [s.scene_number for s in scenes] == [1, 2, 3, 4, 5]
        assert scene.storyboard.is_ready
        assert review_context.suggestions == []

    @pytest.mark.asyncio
    async def test_position_beyond_count_appends(self, engine, review_context):
        """Test that a position past the end appends."""
        suggestion = make_suggestion(42)
        review_context.suggestions = [suggestion]

        scene = await engine.accept(suggestion.id)

        assert review_context.document.scenes[-1] is scene
        assert scene.scene_number == 5

    @pytest.mark.asyncio
    async def test_position_one_or_less_becomes_first(self, engine, review_context):
        """Test that a position of one or less inserts first."""
        suggestion = make_suggestion(0)
        review_context.suggestions = [suggestion]

        scene = await engine.accept(suggestion.id)

        assert review_context.document.scenes[0] is scene
        assert scene.scene_number == 1

    @pytest.mark.asyncio
    async def test_scene_is_renumbered_before_storyboard_completes(
        self, engine, review_context, fake_service
    ):
        """Test that scenes are renumbered before the storyboard returns."""
        suggestion = make_suggestion(2)
        review_context.suggestions = [suggestion]
        gate = asyncio.Event()
        fake_service.gates["generate_storyboard_video"] = gate

        task = asyncio.create_task(engine.accept(suggestion.id))
        await asyncio.sleep(0)

        scenes = review_context.document.scenes
        assert [s.scene_number for s in scenes] == [1, 2, 3, 4, 5]
        assert scenes[1].storyboard.is_pending
        assert review_context.suggestions == []

        gate.set()
        scene = await task
        assert scene.storyboard.is_ready

    @pytest.mark.asyncio
    async def test_storyboard_failure_marks_failed(self, engine, review_context, fake_service):
        """Test that a failed storyboard is marked failed."""
        suggestion = make_suggestion(2)
        review_context.suggestions = [suggestion]
        fake_service.errors["generate_storyboard_video"] = RuntimeError("veo quota")

        scene = await engine.accept(suggestion.id)

        assert scene.storyboard.state == AssetState.FAILED
        assert scene in review_context.document.scenes
        assert "try regenerating it manually" in review_context.log[-1]

    @pytest.mark.asyncio
    async def test_unknown_suggestion_is_noop(self, engine, review_context, fake_service):
        """Test accepting an unknown suggestion."""
        assert await engine.accept("missing") is None
        assert len(review_context.document.scenes) == 4
        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_reset_before_storyboard_returns_discards_write(
        self, engine, review_context, fake_service
    ):
        """Test that a storyboard arriving after reset is dropped."""
        suggestion = make_suggestion(2)
        review_context.suggestions = [suggestion]
        gate = asyncio.Event()
        fake_service.gates["generate_storyboard_video"] = gate

        task = asyncio.create_task(engine.accept(suggestion.id))
        await asyncio.sleep(0)
        review_context.reset()
        gate.set()
        await task

        assert review_context.document is None
        assert review_context.log == []


class TestReject:
    def test_reject_removes_without_creating_scene(self, engine, review_context):
        """Test that rejecting removes the suggestion only."""
        keep = make_suggestion(1, title="Keep")
        drop = make_suggestion(2, title="Drop")
        review_context.suggestions = [keep, drop]

        assert engine.reject(drop.id)

        assert review_context.suggestions == [keep]
        assert len(review_context.document.scenes) == 4
        assert review_context.log[-1] == "👎 Suggestion rejected."

    def test_reject_unknown_is_noop(self, engine, review_context):
        """Test rejecting an unknown suggestion."""
        assert not engine.reject("missing")
        assert review_context.log == []
