"""Unit tests for RunContext and id-keyed updates."""

from unittest.mock import Mock

import pytest

from models.production import Asset, Character, ProductionStage, RunStatus
from movie_agent.context import RunContext, update_by_id


class TestUpdateById:
    def test_updates_matching_item_only(self):
        """Test that only the item with the given id is updated."""
        first = Character(name="A", description="a")
        second = Character(name="B", description="b")

        assert update_by_id([first, second], second.id, image=Asset.ready("b.png"))

        assert second.image == Asset.ready("b.png")
        assert first.image == Asset.not_started()

    def test_missing_id_returns_false(self):
        """Test that updating an unknown id reports no change."""
        character = Character(name="A", description="a")

        assert not update_by_id([character], "missing", image=Asset.ready("x"))
        assert character.image == Asset.not_started()


class TestRunContext:
    def test_add_log_appends_and_notifies(self, run_context):
        """Test that log lines are appended and broadcast."""
        listener = Mock()
        run_context.subscribe(listener)

        run_context.add_log("hello")

        assert run_context.log == ["hello"]
        listener.assert_called_with({"type": "log", "message": "hello"})

    def test_fail_formats_stage_name(self, run_context):
        """Test the failure message format."""
        run_context.fail(ProductionStage.SCRIPT_ANALYSIS, ValueError("bad script"))

        assert run_context.status == RunStatus.ERROR
        assert run_context.error == "Failure during Script Analysis. Details: bad script"
        assert "Script Analysis" in run_context.log[-1]

    def test_begin_run_bumps_epoch_and_clears(self, review_context):
        """Test that starting a run clears state and bumps the epoch."""
        review_context.add_log("old")
        epoch_before = review_context.epoch

        epoch = review_context.begin_run()

        assert epoch == epoch_before + 1
        assert review_context.document is None
        assert review_context.log == []
        assert review_context.status == RunStatus.RUNNING

    def test_reset_discards_document_and_returns_to_setup(self, review_context):
        """Test that reset discards the document and returns to SETUP."""
        review_context.fail(ProductionStage.RENDERING, "boom")

        review_context.reset()

        assert review_context.document is None
        assert review_context.log == []
        assert review_context.error is None
        assert review_context.status == RunStatus.SETUP

    def test_stale_epoch_write_is_discarded(self, review_context):
        """Test that writes from an old epoch are dropped."""
        character = review_context.document.characters[0]
        stale_epoch = review_context.epoch
        review_context.epoch += 1

        written = review_context.update_character(
            stale_epoch, character.id, image=Asset.ready("late.png")
        )

        assert not written
        assert character.image == Asset.not_started()

    def test_current_epoch_write_is_applied(self, review_context):
        """Test that writes from the current epoch are applied."""
        scene = review_context.document.scenes[0]

        written = review_context.update_scene(
            review_context.epoch, scene.id, storyboard=Asset.ready("clip.mp4")
        )

        assert written
        assert scene.storyboard.value == "clip.mp4"

    def test_progress_logger_goes_quiet_after_reset(self, review_context):
        """Test that progress from a reset run is not logged."""
        log_progress = review_context.progress_logger(review_context.epoch)
        log_progress("first")

        review_context.reset()
        log_progress("second")

        assert review_context.log == []

    def test_unsubscribe_stops_events(self):
        """Test that unsubscribed listeners get no events."""
        context = RunContext()
        listener = Mock()
        context.subscribe(listener)
        context.unsubscribe(listener)

        context.add_log("quiet")

        listener.assert_not_called()

    @pytest.mark.parametrize("has_document", [True, False])
    def test_snapshot_is_serializable(self, review_context, has_document):
        """Test that snapshots serialize to JSON."""
        if not has_document:
            review_context.document = None

        snapshot = review_context.snapshot()

        assert snapshot["status"] == "setup"
        assert (snapshot["document"] is not None) == has_document
