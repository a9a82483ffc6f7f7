"""Unit tests for the offline demo asset service."""

import pytest

from models.production import Character, ProductionDocument
from services.ai_service import ScriptAnalysisError
from services.demo_service import (
    DEMO_ACTORS,
    FINAL_SAMPLE_URL,
    DemoAssetService,
    placeholder_image_url,
)


@pytest.fixture
def demo() -> DemoAssetService:
    return DemoAssetService(delay_scale=0)


@pytest.mark.asyncio
async def test_analysis_returns_canned_production(demo):
    """Test the canned demo analysis."""
    analysis = await demo.analyze_script("Any script at all")

    assert analysis.title == "Galactic Rescue (Demo)"
    assert len(analysis.characters) == 3
    assert [s.scene_number for s in analysis.scenes] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_error_marker_is_rejected(demo):
    """Test that the error marker rejects the script."""
    with pytest.raises(ScriptAnalysisError, match="invalid content"):
        await demo.analyze_script("This has an ERROR inside")


@pytest.mark.asyncio
async def test_casting_cycles_through_actors(demo):
    """Test that demo casting cycles through the actor roster."""
    characters = [Character(name=f"C{i}", description="d") for i in range(5)]

    casting = await demo.match_voice_actors(characters)

    assert casting["C0"] == DEMO_ACTORS[0]
    assert casting["C4"] == DEMO_ACTORS[0]
    assert casting["C3"] == DEMO_ACTORS[3]


@pytest.mark.asyncio
async def test_final_render_reports_progress(demo):
    """Test demo render progress messages."""
    messages = []

    url = await demo.render_final_video(ProductionDocument(title="t", logline="l", script="s"), messages.append)

    assert url == FINAL_SAMPLE_URL
    assert messages[0].startswith("🎥 DEMO MODE")
    assert messages[-1] == "✅ Demo video ready!"


def test_placeholder_uses_last_word_of_first_clause():
    """Test placeholder image labels."""
    assert placeholder_image_url("A grizzled pilot, with a scar").endswith("text=pilot")
    assert placeholder_image_url("").endswith("text=Character")


@pytest.mark.asyncio
@pytest.mark.parametrize("script", ["A tale of terror.", "Errors were made.", "The errorless pilot."])
async def test_error_marker_matches_whole_word_only(demo, script):
    """Test scripts that merely contain the letters of the marker are analyzed."""
    analysis = await demo.analyze_script(script)

    assert analysis.title == "Galactic Rescue (Demo)"
