"""Parser for the compact dice notation used by roster stat lines.

Accepted shapes: a bare integer (``4``), a dice expression with an optional
count and flat bonus (``D6``, ``2D3``, ``D3+3``) and the wildcard ``*``.
"""

from __future__ import annotations

from ..data.lexicon import WILDCARD_TOKEN
from ..errors import MalformedStatValue, UnsupportedDieFace
from ..models import DiceRoll, DieFace, StatValue
from .utils import take_digits

_DIE_MARKERS = frozenset({"D", "d"})


def parse_stat_value(token: str | None, field: str | None = None) -> StatValue:
    text = (token or "").strip()
    if text == WILDCARD_TOKEN:
        return StatValue()

    count_text, position = take_digits(text, 0)
    if position == len(text):
        if not count_text:
            raise MalformedStatValue(token, field)
        return StatValue(flat=int(count_text))

    if text[position] not in _DIE_MARKERS:
        raise MalformedStatValue(token, field)
    face_text, position = take_digits(text, position + 1)
    if not face_text:
        raise MalformedStatValue(token, field)
    try:
        face = DieFace(int(face_text))
    except ValueError:
        raise UnsupportedDieFace(face_text, token) from None

    count = int(count_text) if count_text else 1
    if count < 1:
        raise MalformedStatValue(token, field)

    flat: int | None = None
    if position < len(text):
        if text[position] != "+":
            raise MalformedStatValue(token, field)
        flat_text, position = take_digits(text, position + 1)
        if not flat_text or position != len(text):
            raise MalformedStatValue(token, field)
        flat = int(flat_text)

    return StatValue(dice=DiceRoll(count=count, face=face), flat=flat)
