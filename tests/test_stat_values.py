from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from roster_normalizer.errors import MalformedStatValue, UnsupportedDieFace
from roster_normalizer.models import DiceRoll, DieFace, StatValue
from roster_normalizer.services.stat_values import parse_stat_value


def test_dice_count_face_and_bonus():
    value = parse_stat_value("2D3+1")

    assert value.dice == DiceRoll(count=2, face=DieFace.D3)
    assert value.flat == 1


def test_single_die_defaults_count_and_has_no_bonus():
    value = parse_stat_value("D6")

    assert value.dice == DiceRoll(count=1, face=DieFace.D6)
    assert value.flat is None


def test_bare_integer_is_flat_only():
    value = parse_stat_value("4")

    assert value.flat == 4
    assert value.dice is None


def test_wildcard_leaves_both_parts_empty():
    value = parse_stat_value("*")

    assert value == StatValue()
    assert value.is_empty


@pytest.mark.parametrize(
    "token, expected",
    [
        ("D3+3", StatValue(dice=DiceRoll(1, DieFace.D3), flat=3)),
        ("3D6", StatValue(dice=DiceRoll(3, DieFace.D6))),
        ("d3", StatValue(dice=DiceRoll(1, DieFace.D3))),
        (" 2D6 ", StatValue(dice=DiceRoll(2, DieFace.D6))),
        ("12", StatValue(flat=12)),
    ],
)
def test_recognized_shapes(token: str, expected: StatValue):
    assert parse_stat_value(token) == expected


@pytest.mark.parametrize("token", ["", "-", "N/A", "2D", "D6+", "3+", "D6x", "0D6", "D3+1+1", None])
def test_malformed_tokens_are_rejected(token):
    with pytest.raises(MalformedStatValue):
        parse_stat_value(token)


@pytest.mark.parametrize("token", ["D8", "2D66", "D4+1"])
def test_unsupported_die_faces(token: str):
    with pytest.raises(UnsupportedDieFace) as excinfo:
        parse_stat_value(token)

    assert excinfo.value.token == token


def test_error_message_names_the_field():
    with pytest.raises(MalformedStatValue) as excinfo:
        parse_stat_value("lots", field="A")

    assert "for A" in str(excinfo.value)
    assert "'lots'" in str(excinfo.value)


def test_stat_value_text_form():
    assert str(parse_stat_value("2D3+1")) == "2D3+1"
    assert str(parse_stat_value("D6")) == "D6"
    assert str(parse_stat_value("*")) == "*"
