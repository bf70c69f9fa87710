"""Validation boundary for untrusted score submissions.

Every request body is parsed into either a :class:`ValidScore` or a
:class:`Rejection` before any other code looks at its fields.
"""

import math
import re
from dataclasses import dataclass, asdict
from typing import Any, Mapping, Optional, Union

NAME_MAX_LEN = 20

WAVES_RANGE = (1, 500)
KILLS_RANGE = (0, 1_000_000)
TOWERS_RANGE = (0, 100_000)
TIME_RANGE = (0, 86_400)

# Counters the game may omit; absent or null means zero.
OPTIONAL_COUNTERS = {
    'kills': KILLS_RANGE,
    'towers_built': TOWERS_RANGE,
    'towers_lost': TOWERS_RANGE,
    'time_s': TIME_RANGE,
}

INVALID_NAME = 'Invalid name'
INVALID_WAVES = 'Invalid waves count'
INVALID_SCORE = 'Invalid score'
FAILED_SANITY = 'Score failed sanity check'

_CONTROL_CHARS = re.compile('[\x00-\x1f\x7f]')
_NUMERIC_TEXT = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


@dataclass(frozen=True)
class ValidScore:
    name: str
    waves: int
    kills: int = 0
    towers_built: int = 0
    towers_lost: int = 0
    time_s: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Rejection:
    reason: str


ValidationResult = Union[ValidScore, Rejection]


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        # Plain decimal notation only: no "nan", "inf" or digit separators
        if not _NUMERIC_TEXT.fullmatch(text):
            return math.nan
        return float(text)
    return math.nan


def clamp_int(value: Any, min_value: int, max_value: int) -> Optional[int]:
    """Floor ``value`` to an int and return it if it lies in ``[min_value, max_value]``.

    Returns ``None`` for non-numeric, non-finite or out-of-range input.
    """
    number = _to_number(value)
    if not math.isfinite(number):
        return None
    result = math.floor(number)
    if result < min_value or result > max_value:
        return None
    return result


def sanitize_name(value: Any) -> str:
    """Strip control characters and surrounding whitespace, cap at 20 chars.

    An empty result means the name is unusable.
    """
    if value is None:
        return ''
    text = _CONTROL_CHARS.sub('', str(value)).strip()
    return text[:NAME_MAX_LEN]


def passes_sanity_check(score: ValidScore) -> bool:
    """Cheap plausibility floor: deep runs must come with a matching kill count."""
    return not (score.waves > 50 and score.kills < score.waves * 3)


def validate_submission(body: Mapping[str, Any]) -> ValidationResult:
    name = sanitize_name(body.get('name'))
    if not name:
        return Rejection(INVALID_NAME)

    waves = clamp_int(body.get('waves'), *WAVES_RANGE)
    if waves is None:
        return Rejection(INVALID_WAVES)

    counters = {}
    for field, (low, high) in OPTIONAL_COUNTERS.items():
        raw = body.get(field)
        counters[field] = clamp_int(0 if raw is None else raw, low, high)
        if counters[field] is None:
            return Rejection(INVALID_SCORE)

    return ValidScore(name=name, waves=waves, **counters)
