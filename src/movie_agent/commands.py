"""Free-text (voice) command routing."""

import re
from enum import Enum
from typing import Optional

from models.production import RunStatus


class CommandAction(str, Enum):
    SUBMIT = "submit"
    FINALIZE = "finalize"
    RESET = "reset"


# Keywords accepted per run status, checked as substrings of the normalized command
COMMAND_KEYWORDS: dict[RunStatus, tuple[tuple[str, ...], CommandAction]] = {
    RunStatus.SETUP: (("generate", "create", "start"), CommandAction.SUBMIT),
    RunStatus.REVIEW: (("render", "finalize", "finish"), CommandAction.FINALIZE),
    RunStatus.COMPLETE: (("again", "new", "reset"), CommandAction.RESET),
    RunStatus.ERROR: (("try again", "reset"), CommandAction.RESET),
}


def normalize_command(command: str) -> str:
    """Lowercase and drop everything but letters and whitespace."""
    return re.sub(r"[^a-z\s]", "", command.lower())


class CommandRouter:
    """Maps a spoken or typed command to an action allowed in the current status."""

    def resolve(self, command: str, status: RunStatus) -> Optional[CommandAction]:
        entry = COMMAND_KEYWORDS.get(status)
        if entry is None:
            return None
        keywords, action = entry
        normalized = normalize_command(command)
        if any(keyword in normalized for keyword in keywords):
            return action
        return None
