"""Shared pytest fixtures for moviemaker tests."""

import asyncio
import sys
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from models.production import (  # noqa: E402
    Character,
    ProductionDocument,
    ProductionRequest,
    Scene,
    SceneSuggestion,
    ScriptAnalysis,
    VoiceActor,
)
from movie_agent.agent import MovieProductionAgent  # noqa: E402
from movie_agent.context import RunContext  # noqa: E402


def make_analysis() -> ScriptAnalysis:
    """Fresh analysis with new ids on every call."""
    return ScriptAnalysis(
        title="Galactic Rescue",
        logline="A pilot and a botanist rescue a stranded research team.",
        characters=[
            Character(name="Kael", description="A grizzled starship pilot"),
            Character(name="Zora", description="A brilliant xenobotanist"),
            Character(name="Unit 734", description="A witty droid companion"),
        ],
        scenes=[
            Scene(scene_number=1, description="The bridge receives a distress signal."),
            Scene(scene_number=2, description="The team crosses a glowing jungle."),
            Scene(scene_number=3, description="A cavern hides the stranded team."),
            Scene(scene_number=4, description="The ship escapes the planet."),
        ],
    )


class FakeAssetService:
    """Scriptable in-memory AssetService.

    errors: method name -> exception raised on every call
    item_errors: method name -> {key: exception}, key being the description
        (images, storyboards) or character name (voice lines)
    gates: method name -> asyncio.Event awaited before returning
    """

    def __init__(self):
        self.calls: list[tuple[str, object]] = []
        self.errors: Dict[str, Exception] = {}
        self.item_errors: Dict[str, Dict[str, Exception]] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.style = "noir, high contrast"
        self.suggestions: list[SceneSuggestion] = []
        self.casting: Dict[str, VoiceActor] | None = None
        self.counter = 0

    async def _call(self, method: str, key=None) -> None:
        self.calls.append((method, key))
        gate = self.gates.get(method)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if method in self.errors:
            raise self.errors[method]
        item_error = self.item_errors.get(method, {}).get(key)
        if item_error is not None:
            raise item_error

    def calls_to(self, method: str) -> list:
        return [key for name, key in self.calls if name == method]

    def _next(self, prefix: str, key: str) -> str:
        self.counter += 1
        return f"{prefix}://{key}#{self.counter}"

    async def analyze_script(self, script: str) -> ScriptAnalysis:
        await self._call("analyze_script", script)
        return make_analysis()

    async def analyze_image_style(self, reference) -> str:
        await self._call("analyze_image_style", reference.mime_type)
        return self.style

    async def generate_scene_suggestions(self, logline, scenes):
        await self._call("generate_scene_suggestions", logline)
        return list(self.suggestions)

    async def match_voice_actors(self, characters):
        await self._call("match_voice_actors", len(characters))
        if self.casting is not None:
            return dict(self.casting)
        return {
            c.name: VoiceActor(name=f"Actor {index}", vocal_style="Warm")
            for index, c in enumerate(characters)
        }

    async def generate_character_voice_line(self, character) -> str:
        await self._call("generate_character_voice_line", character.name)
        return f"Line for {character.name}"

    async def generate_character_image(self, description, style_prompt=None, quality=None) -> str:
        await self._call("generate_character_image", description)
        return self._next("image", description)

    async def generate_storyboard_video(self, description, style_prompt=None, quality=None) -> str:
        await self._call("generate_storyboard_video", description)
        return self._next("video", description)

    async def edit_image(self, image_reference, instruction) -> str:
        await self._call("edit_image", instruction)
        return self._next("edited", instruction)

    async def enhance_scene_description(self, description) -> str:
        await self._call("enhance_scene_description", description)
        return f"{description} (enhanced)"

    async def render_final_video(self, document, progress_callback) -> str:
        await self._call("render_final_video", document.title)
        progress_callback("⏳ Rendering...")
        return "final.mp4"

    async def render_promo_video(self, document, progress_callback) -> str:
        await self._call("render_promo_video", document.title)
        progress_callback("⏳ Cutting trailer...")
        return "promo.mp4"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config(temp_dir) -> Dict:
    """Sample configuration for testing."""
    return {
        "gemini_api_key": "test_gemini_key",
        "gemini_model": "gemini-2.5-flash",
        "image_model": "imagen-4.0-generate-001",
        "image_edit_model": "gemini-2.5-flash-image",
        "video_model": "veo-2.0-generate-001",
        "video_poll_interval": 0.01,
        "storyboard_poll_interval": 0.01,
        "demo_mode": False,
        "character_visual_concurrency": 1,
        "storyboard_concurrency": 1,
        "local_output_folder": str(temp_dir),
        "log_level": "INFO",
    }


@pytest.fixture
def fake_service() -> FakeAssetService:
    return FakeAssetService()


@pytest.fixture
def run_context() -> RunContext:
    return RunContext()


@pytest.fixture
def sample_request() -> ProductionRequest:
    return ProductionRequest(script="INT. BRIDGE - NIGHT. Kael answers a distress call.")


@pytest.fixture
def review_context(run_context) -> RunContext:
    """Context holding a populated document, as after pre-production."""
    analysis = make_analysis()
    run_context.document = ProductionDocument(
        title=analysis.title,
        logline=analysis.logline,
        script="script",
        characters=analysis.characters,
        scenes=analysis.scenes,
    )
    return run_context


@pytest.fixture
def agent(sample_config, fake_service) -> MovieProductionAgent:
    return MovieProductionAgent(config=sample_config, service=fake_service)
