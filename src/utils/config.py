"""Configuration loading and validation for moviemaker."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def load_config() -> dict:
    """Load configuration from environment variables."""

    def resolve_path(path: str | None, default_relative: str) -> str:
        if not path:
            return str(PROJECT_ROOT / default_relative)
        if Path(path).is_absolute():
            return path
        return str(PROJECT_ROOT / path)

    config = {
        # Required API key (unless running in demo mode)
        "gemini_api_key": os.getenv("GEMINI_API_KEY"),
        # Model configurations
        "gemini_model": os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        "image_model": os.getenv("IMAGE_MODEL", "imagen-4.0-generate-001"),
        "image_edit_model": os.getenv("IMAGE_EDIT_MODEL", "gemini-2.5-flash-image"),
        "video_model": os.getenv("VIDEO_MODEL", "veo-2.0-generate-001"),
        # Long-running video job polling (seconds)
        "video_poll_interval": float(os.getenv("VIDEO_POLL_INTERVAL", "10")),
        "storyboard_poll_interval": float(os.getenv("STORYBOARD_POLL_INTERVAL", "5")),
        # Offline placeholder backends
        "demo_mode": _env_flag("DEMO_MODE"),
        # One-at-a-time by default to respect external rate limits
        "character_visual_concurrency": int(os.getenv("CHARACTER_VISUAL_CONCURRENCY", "1")),
        "storyboard_concurrency": int(os.getenv("STORYBOARD_CONCURRENCY", "1")),
        # Output destination for downloaded videos
        "local_output_folder": resolve_path(os.getenv("LOCAL_OUTPUT_FOLDER"), "output"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not config.get("demo_mode") and not config.get("gemini_api_key"):
        errors.append("GEMINI_API_KEY is required (or set DEMO_MODE=true)")

    for key in ("character_visual_concurrency", "storyboard_concurrency"):
        if int(config.get(key, 1)) < 1:
            errors.append(f"{key.upper()} must be at least 1")

    for key in ("video_poll_interval", "storyboard_poll_interval"):
        if float(config.get(key, 0)) <= 0:
            errors.append(f"{key.upper()} must be positive")

    output_folder = config.get("local_output_folder")
    if output_folder:
        try:
            Path(output_folder).mkdir(parents=True, exist_ok=True)
        except Exception as e:
            errors.append(f"Cannot create local output folder: {e}")

    return errors


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> None:
    """Set up logging configuration with Rich for terminal output."""
    logging.root.handlers.clear()

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handlers: list[logging.Handler] = [rich_handler]

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        format="%(message)s",
    )

    # Suppress noisy third-party loggers
    noisy_loggers = [
        "httpx",
        "httpcore",
        "google_genai",
        "google_genai.models",
        "urllib3.connectionpool",
    ]

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
