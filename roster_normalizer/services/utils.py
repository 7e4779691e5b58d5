from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from ..errors import MalformedStatValue
from ..models import Weapon

_INCH_MARKS = ('"', "”", "''")


def take_digits(text: str, start: int) -> tuple[str, int]:
    end = start
    while end < len(text) and "0" <= text[end] <= "9":
        end += 1
    return text[start:end], end


def has_digits(text: str) -> bool:
    return any("0" <= char <= "9" for char in text)


def parse_int(value: str | None, field: str | None = None, signed: bool = False) -> int:
    text = (value or "").strip()
    body = text[1:] if signed and text[:1] in {"+", "-"} else text
    digits, end = take_digits(body, 0)
    if not digits or end != len(body):
        raise MalformedStatValue(value, field)
    return int(text)


def parse_plus_value(value: str | None, field: str | None = None) -> int:
    """Read ``3+`` style rolls; a token without the ``+`` suffix means 0."""
    text = (value or "").strip()
    if not text.endswith("+"):
        return 0
    return parse_int(text[:-1], field)


def parse_distance(
    value: str | None, field: str | None = None
) -> tuple[int | None, int] | None:
    """Read ``6"``, ``6`` or ``3-12"`` as ``(minimum, maximum)``.

    Returns None when the token carries no number at all (``-``, ``*``,
    ``Melee``). A bare distance has no minimum.
    """
    text = (value or "").strip()
    for mark in _INCH_MARKS:
        if text.endswith(mark):
            text = text[: -len(mark)].rstrip()
            break
    if not has_digits(text):
        return None
    low_text, position = take_digits(text, 0)
    if not low_text:
        raise MalformedStatValue(value, field)
    if position == len(text):
        return None, int(low_text)
    if text[position] != "-":
        raise MalformedStatValue(value, field)
    high_text, position = take_digits(text, position + 1)
    if not high_text or position != len(text):
        raise MalformedStatValue(value, field)
    return int(low_text), int(high_text)


def dedupe_sorted(names: Iterable[str | None]) -> tuple[str, ...]:
    return tuple(sorted({name for name in names if name}))


def merge_weapons(weapons: Iterable[Weapon]) -> tuple[Weapon, ...]:
    """Collapse weapons sharing a name into one entry, summing their counts.

    First-seen order is kept, so merging an already merged list is a no-op.
    """
    merged: dict[str, Weapon] = {}
    for weapon in weapons:
        existing = merged.get(weapon.name)
        if existing is None:
            merged[weapon.name] = weapon
        else:
            merged[weapon.name] = replace(existing, count=existing.count + weapon.count)
    return tuple(merged.values())
