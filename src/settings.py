# settings.py
# Engine configuration: board size, win tile and command queue pacing.

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "GAME2048_"


class EngineSettings(BaseModel):
    """Validated construction parameters for a game."""
    size: int = Field(
        default=4,
        gt=1, # Board size must be at least 2x2
        description="Size of the N x N game board.",
    )
    win_tile: int = Field(
        default=2048,
        gt=0,
        description="The tile value to reach for winning the game.",
    )
    queue_capacity: int = Field(
        default=100,
        gt=0,
        description="Maximum number of move commands waiting in the queue.",
    )
    queue_delay: float = Field(
        default=0.3,
        ge=0,
        description="Seconds to wait after a board-changing move before running the next one.",
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
    """
    Builds settings from defaults overridden by GAME2048_* environment variables.
    Args:
        environ (Mapping[str, str]): Variables to read; defaults to os.environ.
    Returns:
        EngineSettings: The validated settings.
    Raises:
        pydantic.ValidationError: If an override is not a valid value.
    """
    if environ is None:
        environ = os.environ
    overrides = {}
    for name in EngineSettings.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw.strip():
            overrides[name] = raw.strip()
    return EngineSettings.model_validate(overrides)
