"""Main application entry point for moviemaker."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from tqdm import tqdm

from models.production import (
    ProductionDocument,
    ProductionRequest,
    ProductionStage,
    QualityMode,
    RunStatus,
    VisualReference,
)
from movie_agent import MovieProductionAgent
from utils.config import load_config, setup_logging, validate_config
from utils.logging import setup_logging as setup_structured_logging

logger = logging.getLogger(__name__)

PIPELINE_STAGES = [
    ProductionStage.SCRIPT_ANALYSIS,
    ProductionStage.STYLE_ANALYSIS,
    ProductionStage.STORY_CONSULTATION,
    ProductionStage.VOICE_CASTING,
    ProductionStage.VOICE_LINES,
    ProductionStage.CHARACTER_VISUALS,
    ProductionStage.STORYBOARD,
]


class ProgressBarCallback:
    """Stage progress bar fed by run context events."""

    def __init__(self):
        self.bar: Optional[tqdm] = None

    def __call__(self, event: dict):
        if event.get("type") != "stage":
            return

        if self.bar is None:
            self.bar = tqdm(
                total=len(PIPELINE_STAGES),
                desc="Pre-production",
                unit="stage",
                position=0,
                leave=True,
            )

        stage = event.get("stage")
        if stage in PIPELINE_STAGES:
            self.bar.n = PIPELINE_STAGES.index(stage)
            self.bar.set_description(stage.value)
        elif stage is None:
            self.bar.n = self.bar.total
            self.bar.set_description("Pre-production ✓")
        else:
            self.bar.set_description(stage.value)
        self.bar.refresh()

    def close(self):
        if self.bar:
            self.bar.close()


def display_review(console: Console, document: ProductionDocument, suggestions: list) -> None:
    """Print characters, scenes and pending suggestions."""
    console.print(
        Panel(
            f"[bold]{document.title}[/bold]\n{document.logline}",
            title="[bold]Movie[/bold]",
            border_style="blue",
        )
    )

    characters = Table(title="Characters", show_lines=False)
    characters.add_column("Name", style="cyan")
    characters.add_column("Voice Actor", style="magenta")
    characters.add_column("Voice Line", style="white")
    characters.add_column("Image", style="green")
    for character in document.characters:
        actor = (
            f"{character.voice_actor.name} ({character.voice_actor.vocal_style})"
            if character.voice_actor
            else "-"
        )
        voice_line = character.voice_line.value if character.voice_line.is_ready else "-"
        characters.add_row(
            character.name, actor, voice_line, character.image.value or character.image.state.value
        )
    console.print(characters)

    scenes = Table(title="Scenes")
    scenes.add_column("#", style="cyan", justify="right")
    scenes.add_column("Description", style="white")
    scenes.add_column("Storyboard", style="green")
    for scene in document.scenes:
        scenes.add_row(
            str(scene.scene_number),
            scene.description,
            scene.storyboard.value or scene.storyboard.state.value,
        )
    console.print(scenes)

    if suggestions:
        table = Table(title="Scene Suggestions")
        table.add_column("Position", style="cyan", justify="right")
        table.add_column("Title", style="yellow")
        table.add_column("Reasoning", style="white")
        for suggestion in suggestions:
            table.add_row(str(suggestion.suggested_position), suggestion.title, suggestion.reasoning)
        console.print(table)


class MovieMakerApp:
    """Runs one production from the command line."""

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.console = Console()

    def _build_request(self) -> ProductionRequest:
        script = Path(self.args.script_file).read_text(encoding="utf-8")
        reference = None
        if self.args.reference:
            reference = VisualReference.from_path(self.args.reference)
        return ProductionRequest(
            script=script,
            reference=reference,
            quality=QualityMode.HIGH if self.args.high_quality else QualityMode.STANDARD,
            music_style=self.args.music_style,
        )

    async def run(self) -> int:
        """Run the pipeline and return the process exit code."""
        config = load_config()
        if self.args.demo:
            config["demo_mode"] = True

        errors = validate_config(config)
        if errors:
            for error in errors:
                self.console.print(f"[red]Config error:[/red] {error}")
            return 1

        request = self._build_request()
        agent = MovieProductionAgent(config)
        progress_callback = ProgressBarCallback()
        agent.context.subscribe(progress_callback)

        try:
            try:
                await agent.submit(request)
            finally:
                progress_callback.close()

            if agent.status == RunStatus.ERROR:
                self.console.print(f"[bold red]{agent.context.error}[/bold red]")
                return 1

            display_review(self.console, agent.document, agent.context.suggestions)

            if self.args.render:
                await agent.finalize()
                if agent.status == RunStatus.ERROR:
                    self.console.print(f"[bold red]{agent.context.error}[/bold red]")
                    return 1
                self.console.print(
                    f"[bold green]Final movie:[/bold green] {agent.document.final_video.value}"
                )
            return 0
        finally:
            await agent.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Script-to-movie production pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  moviemaker script.txt --demo               # Offline run with placeholder assets
  moviemaker script.txt --reference ref.png  # Match the style of an image
  moviemaker script.txt --render             # Render the final movie after review
        """,
    )
    parser.add_argument("script_file", help="Path to the movie script (plain text)")
    parser.add_argument("--reference", help="Optional inspiration image or video")
    parser.add_argument(
        "--high-quality", action="store_true", help="Use high quality visual generation"
    )
    parser.add_argument("--music-style", default="Cinematic", help="Music mood for the render")
    parser.add_argument(
        "--demo", action="store_true", help="Use offline placeholder assets (no API calls)"
    )
    parser.add_argument(
        "--render", action="store_true", help="Render the final movie after pre-production"
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL)")
    return parser


def main():
    """Main entry point."""
    args = build_parser().parse_args()

    config = load_config()
    log_level = args.log_level or config["log_level"]
    if args.json_logs:
        setup_structured_logging(log_level, json_output=True)
    else:
        log_dir = Path(config["local_output_folder"])
        log_dir.mkdir(parents=True, exist_ok=True)
        setup_logging(log_level, log_dir / "moviemaker.log")

    if not Path(args.script_file).exists():
        logger.error(f"Script file not found: {args.script_file}")
        sys.exit(1)

    app = MovieMakerApp(args)
    try:
        exit_code = asyncio.run(app.run())
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Application error: {e}")
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
