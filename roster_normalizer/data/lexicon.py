from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..models import WeaponClass

UNIT_PROFILE = "Unit"
WEAPON_PROFILE = "Weapon"
PSYKER_PROFILE = "Psyker"
PSYCHIC_POWER_PROFILE = "Psychic Power"
ABILITIES_PROFILE = "Abilities"
ALLEGIANCE_OATH_PROFILE = "Allegiance Oath"
STAT_DAMAGE_PROFILE = "Stat Damage - M/BS/A"

DETACHMENT_ABILITY_PROFILES = frozenset({ABILITIES_PROFILE, ALLEGIANCE_OATH_PROFILE})

CONFIGURATION_CATEGORY = "Configuration"
STRATAGEMS_CATEGORY = "Stratagems"

MODEL_SELECTION = "model"
UNIT_SELECTION = "unit"
UPGRADE_SELECTION = "upgrade"

NOT_APPLICABLE_TOKENS = frozenset({"", "-"})
WILDCARD_TOKEN = "*"


@dataclass(frozen=True)
class Lexicon:
    """Closed set of characteristic names accepted by one profile kind."""

    kind: str
    fields: Mapping[str, str]

    def field_for(self, name: str) -> str | None:
        return self.fields.get(name.strip())


MODEL_LEXICON = Lexicon(
    kind="model",
    fields={
        "M": "movement",
        "Movement": "movement",
        "WS": "weapon_skill",
        "BS": "ballistic_skill",
        "S": "strength",
        "T": "toughness",
        "W": "wounds",
        "A": "attacks",
        "Attacks": "attacks",
        "Ld": "leadership",
        "Save": "save",
        "Remaining W": "remaining_wounds",
    },
)

WEAPON_LEXICON = Lexicon(
    kind="weapon",
    fields={
        "Range": "range",
        "Type": "type",
        "S": "strength",
        "AP": "armour_penetration",
        "D": "damage",
        "Abilities": "abilities",
    },
)

PSYKER_LEXICON = Lexicon(
    kind="psyker",
    fields={
        "Cast": "casts",
        "Deny": "deny",
        "Powers Known": "powers_known",
        "Other": "other",
    },
)

PSYCHIC_POWER_LEXICON = Lexicon(
    kind="psychic power",
    fields={
        "Warp Charge": "warp_charge",
        "Range": "range",
        "Details": "description",
    },
)

ABILITY_LEXICON = Lexicon(
    kind="ability",
    fields={
        "Description": "description",
        "Effect": "description",
    },
)


@dataclass(frozen=True)
class WeaponTypeToken:
    weapon_class: WeaponClass
    # Position of the attack-count token in the split "Type" value, None when
    # the class takes the wielder's attacks.
    attacks_index: int | None
    follower: str | None = None


WEAPON_TYPE_TOKENS: dict[str, WeaponTypeToken] = {
    "Assault": WeaponTypeToken(WeaponClass.ASSAULT, 1),
    "Heavy": WeaponTypeToken(WeaponClass.HEAVY, 1),
    "Grenade": WeaponTypeToken(WeaponClass.GRENADE, 1),
    "Pistol": WeaponTypeToken(WeaponClass.PISTOL, 1),
    "Rapid": WeaponTypeToken(WeaponClass.RAPID_FIRE, 2, follower="Fire"),
    "Melee": WeaponTypeToken(WeaponClass.MELEE, None),
}


def find_weapon_type(token: str) -> WeaponTypeToken | None:
    return WEAPON_TYPE_TOKENS.get(token)
