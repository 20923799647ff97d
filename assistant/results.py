"""
assistant/results.py

Outcome types shared by the pipeline stages.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class StageResult:
    """What a stage produced.

    `ok` is False when the stage degraded; `value` then holds the fallback the
    pipeline should use (or None when there is nothing to fall back to) and
    `error` a short description for the logs.
    """
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error, value=None):
        return cls(ok=False, value=value, error=str(error))


class PipelineError(RuntimeError):
    """A turn could not produce any reply."""
