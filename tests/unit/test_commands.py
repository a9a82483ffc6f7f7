"""Unit tests for voice command routing."""

import pytest

from models.production import RunStatus
from movie_agent.commands import CommandAction, CommandRouter, normalize_command


@pytest.fixture
def router() -> CommandRouter:
    return CommandRouter()


@pytest.mark.parametrize(
    "command,status,expected",
    [
        ("Generate my movie!", RunStatus.SETUP, CommandAction.SUBMIT),
        ("start", RunStatus.SETUP, CommandAction.SUBMIT),
        ("Please render it", RunStatus.REVIEW, CommandAction.FINALIZE),
        ("finish up", RunStatus.REVIEW, CommandAction.FINALIZE),
        ("Make a new one", RunStatus.COMPLETE, CommandAction.RESET),
        ("try again", RunStatus.ERROR, CommandAction.RESET),
        ("RESET.", RunStatus.ERROR, CommandAction.RESET),
    ],
)
def test_matching_commands(router, command, status, expected):
    """Test keyword matching for each run status."""
    assert router.resolve(command, status) == expected


@pytest.mark.parametrize(
    "command,status",
    [
        ("render", RunStatus.SETUP),
        ("generate", RunStatus.REVIEW),
        ("again", RunStatus.ERROR),
        ("reset", RunStatus.RUNNING),
        ("hello there", RunStatus.COMPLETE),
    ],
)
def test_commands_outside_their_status_are_ignored(router, command, status):
    """Test that keywords only match in their own status."""
    assert router.resolve(command, status) is None


def test_normalize_strips_punctuation_and_digits():
    """Test command normalization."""
    assert normalize_command("Render, NOW! 123") == "render now "
