"""Typed readers for the characteristic sets of each profile kind.

Every reader is closed-world: a characteristic name outside its lexicon is
an error, never skipped.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

from ..data.lexicon import (
    ABILITY_LEXICON,
    MODEL_LEXICON,
    NOT_APPLICABLE_TOKENS,
    PSYCHIC_POWER_LEXICON,
    PSYKER_LEXICON,
    WEAPON_LEXICON,
    WILDCARD_TOKEN,
    Lexicon,
    find_weapon_type,
)
from ..errors import (
    MalformedStatValue,
    UnknownCharacteristic,
    UnresolvableWounds,
    UnsupportedWeaponType,
)
from ..models import (
    Ability,
    ModelProfile,
    PsychicPower,
    PsykerProfile,
    StatValue,
    StrengthKind,
    WeaponClass,
    WeaponProfile,
    WeaponStrength,
)
from ..schemas import Characteristic
from .stat_values import parse_stat_value
from .utils import parse_distance, parse_int, parse_plus_value, take_digits

_WOUNDS_REMAINING_SUFFIX = " Wounds Remaining)"
_STRENGTH_MODIFIERS = {
    "+": StrengthKind.ADDITION,
    "x": StrengthKind.MULTIPLY,
    "X": StrengthKind.MULTIPLY,
}
_USER_STRENGTH = "User"


def _fields(
    characteristics: Sequence[Characteristic], lexicon: Lexicon
) -> Iterator[tuple[str, str, str]]:
    for characteristic in characteristics:
        field = lexicon.field_for(characteristic.name)
        if field is None:
            raise UnknownCharacteristic(characteristic.name, lexicon.kind)
        yield field, characteristic.name, (characteristic.value or "").strip()


def _optional_text(value: str) -> str | None:
    return None if value in NOT_APPLICABLE_TOKENS else value


def wounds_from_profile_name(profile_name: str) -> int | None:
    """Read ``[2] (3-5 Wounds Remaining)`` style tier names, upper bound first."""
    start = profile_name.find("[")
    while start != -1:
        index_text, position = take_digits(profile_name, start + 1)
        if index_text and profile_name.startswith("] (", position):
            low_text, position = take_digits(profile_name, position + 3)
            if low_text and profile_name[position : position + 1] in {"+", "-"}:
                high_text, position = take_digits(profile_name, position + 1)
                if profile_name.startswith(_WOUNDS_REMAINING_SUFFIX, position):
                    return int(high_text or low_text)
        start = profile_name.find("[", start + 1)
    return None


def _parse_wounds(value: str, profile_name: str) -> int:
    digits, end = take_digits(value, 0)
    if digits and end == len(value):
        return int(digits)
    wounds = wounds_from_profile_name(profile_name)
    if wounds is None:
        raise UnresolvableWounds(value, profile_name)
    return wounds


def _parse_remaining_wounds(value: str, profile_name: str) -> int:
    low_text, position = take_digits(value, 0)
    if not low_text or value[position : position + 1] != "-":
        raise UnresolvableWounds(value, profile_name)
    high_text, position = take_digits(value, position + 1)
    if not high_text or position != len(value):
        raise UnresolvableWounds(value, profile_name)
    return int(high_text)


def parse_model_profile(
    characteristics: Sequence[Characteristic], profile_name: str = ""
) -> ModelProfile:
    values: dict[str, Any] = {"name": profile_name}
    for field, name, value in _fields(characteristics, MODEL_LEXICON):
        if field == "movement":
            distance = parse_distance(value, name)
            minimum, maximum = distance if distance is not None else (0, 0)
            values["min_movement"] = minimum or 0
            values["movement"] = maximum
        elif field in {"weapon_skill", "ballistic_skill", "save"}:
            values[field] = parse_plus_value(value, name)
        elif field in {"strength", "toughness", "leadership"}:
            values[field] = parse_int(value, name)
        elif field == "wounds":
            values["wounds"] = _parse_wounds(value, profile_name)
        elif field == "remaining_wounds":
            values["wounds"] = _parse_remaining_wounds(value, profile_name)
        elif field == "attacks":
            values["attacks"] = parse_stat_value(value, name)
    return ModelProfile(**values)


def parse_weapon_type(value: str) -> tuple[WeaponClass, StatValue | None]:
    tokens = value.split()
    entry = find_weapon_type(tokens[0]) if tokens else None
    if entry is None:
        raise UnsupportedWeaponType(tokens[0] if tokens else value)
    if entry.follower is not None and tokens[1:2] != [entry.follower]:
        raise UnsupportedWeaponType(value)
    if entry.attacks_index is None:
        if len(tokens) > 1:
            raise MalformedStatValue(value, "Type")
        return entry.weapon_class, None
    if len(tokens) != entry.attacks_index + 1:
        raise MalformedStatValue(value, "Type")
    return entry.weapon_class, parse_stat_value(tokens[entry.attacks_index], "Type")


def parse_weapon_strength(value: str) -> WeaponStrength:
    if value == WILDCARD_TOKEN:
        return WeaponStrength(0, StrengthKind.FLAT)
    if value == _USER_STRENGTH:
        return WeaponStrength(0, StrengthKind.ADDITION)
    kind = _STRENGTH_MODIFIERS.get(value[:1])
    if kind is not None:
        return WeaponStrength(parse_int(value[1:], "S"), kind)
    return WeaponStrength(parse_int(value, "S"), StrengthKind.FLAT)


def parse_weapon_profile(
    characteristics: Sequence[Characteristic], profile_name: str = ""
) -> WeaponProfile:
    weapon_class = WeaponClass.MELEE
    attacks: StatValue | None = None
    weapon_range: int | None = None
    strength = WeaponStrength(0, StrengthKind.ADDITION)
    armour_penetration = 0
    damage = StatValue()
    abilities: list[Ability] = []

    for field, name, value in _fields(characteristics, WEAPON_LEXICON):
        if field == "range":
            distance = parse_distance(value, name)
            weapon_range = distance[1] if distance is not None else None
        elif field == "type":
            weapon_class, attacks = parse_weapon_type(value)
        elif field == "strength":
            strength = parse_weapon_strength(value)
        elif field == "armour_penetration":
            armour_penetration = (
                0 if value == WILDCARD_TOKEN else parse_int(value, name, signed=True)
            )
        elif field == "damage":
            damage = StatValue(flat=0) if value == WILDCARD_TOKEN else parse_stat_value(value, name)
        elif field == "abilities":
            if value not in NOT_APPLICABLE_TOKENS:
                abilities.append(Ability(name=profile_name, description=value))

    return WeaponProfile(
        weapon_class=weapon_class,
        strength=strength,
        damage=damage,
        range=weapon_range,
        attacks=attacks,
        armour_penetration=armour_penetration,
        abilities=tuple(abilities),
    )


def parse_psyker_profile(
    characteristics: Sequence[Characteristic], profile_name: str = ""
) -> PsykerProfile:
    values: dict[str, Any] = {}
    for field, name, value in _fields(characteristics, PSYKER_LEXICON):
        if field in {"casts", "deny"}:
            values[field] = parse_int(value, name)
        else:
            values[field] = _optional_text(value)
    return PsykerProfile(**values)


def parse_psychic_power(
    characteristics: Sequence[Characteristic], profile_name: str = ""
) -> PsychicPower:
    values: dict[str, Any] = {"name": profile_name}
    for field, name, value in _fields(characteristics, PSYCHIC_POWER_LEXICON):
        if field == "warp_charge":
            values["warp_charge"] = parse_int(value, name)
        elif field == "range":
            distance = parse_distance(value, name)
            values["range"] = distance[1] if distance is not None else 0
        else:
            values["description"] = value
    return PsychicPower(**values)


def parse_ability(
    characteristics: Sequence[Characteristic], profile_name: str = ""
) -> Ability:
    description = ""
    for _field, _name, value in _fields(characteristics, ABILITY_LEXICON):
        if value and not description:
            description = value
    return Ability(name=profile_name, description=description)
