"""``{{placeholder}}`` substitution shared by contracts and notifications."""

from __future__ import annotations

import re
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def render_template(text: str, variables: dict[str, Any]) -> str:
    """Substitute ``{{key}}`` placeholders; unknown keys are left in place."""

    def _replace(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_replace, text or "")
