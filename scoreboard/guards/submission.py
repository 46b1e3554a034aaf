from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from scoreboard.errors import ValidationError


NAME_MAX_LENGTH = 30
MIN_TIME = 30
MAX_TIME = 86400


@dataclass(frozen=True)
class ValidatedScore:
    name: str
    time: int


def validate_name(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValidationError("name required")
    name = raw.strip()
    if not name:
        raise ValidationError("name required")
    return name[:NAME_MAX_LENGTH]


def validate_time(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValidationError("time must be an integer")
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if not isinstance(raw, int):
        raise ValidationError("time must be an integer")
    if raw < MIN_TIME:
        raise ValidationError("time too fast")
    if raw > MAX_TIME:
        raise ValidationError("time unrealistic")
    return raw


def validate_submission(body: Mapping[str, Any]) -> ValidatedScore:
    """Check a submitted score payload.

    The name is checked before the time so that a payload with both fields
    invalid always reports the name error.
    """

    name = validate_name(body.get("name"))
    time = validate_time(body.get("time"))
    return ValidatedScore(name=name, time=time)
