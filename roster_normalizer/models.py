from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DieFace(Enum):
    D3 = 3
    D6 = 6


class WeaponClass(Enum):
    PISTOL = "Pistol"
    ASSAULT = "Assault"
    HEAVY = "Heavy"
    RAPID_FIRE = "Rapid Fire"
    GRENADE = "Grenade"
    MELEE = "Melee"


class StrengthKind(Enum):
    ADDITION = "addition"
    MULTIPLY = "multiply"
    FLAT = "flat"


@dataclass(frozen=True)
class DiceRoll:
    count: int
    face: DieFace

    def __str__(self) -> str:
        prefix = "" if self.count == 1 else str(self.count)
        return f"{prefix}D{self.face.value}"


@dataclass(frozen=True)
class StatValue:
    """A statistic that may be flat, dice based or both ("2D3+1").

    Both parts empty means the roster left the value to context (``*``); it
    must not be read as zero.
    """

    dice: DiceRoll | None = None
    flat: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.dice is None and self.flat is None

    def __str__(self) -> str:
        if self.is_empty:
            return "*"
        if self.dice is None:
            return str(self.flat)
        if self.flat is None:
            return str(self.dice)
        return f"{self.dice}+{self.flat}"


@dataclass(frozen=True)
class Ability:
    name: str
    description: str


@dataclass(frozen=True)
class ModelProfile:
    name: str = ""
    movement: int = 0
    min_movement: int = 0
    weapon_skill: int = 0
    ballistic_skill: int = 0
    strength: int = 0
    toughness: int = 0
    wounds: int = 0
    attacks: StatValue = StatValue()
    leadership: int = 0
    save: int = 0


@dataclass(frozen=True)
class WeaponStrength:
    value: int
    kind: StrengthKind

    def __str__(self) -> str:
        if self.kind is StrengthKind.ADDITION:
            return f"+{self.value}" if self.value else "User"
        if self.kind is StrengthKind.MULTIPLY:
            return f"x{self.value}"
        return str(self.value)


@dataclass(frozen=True)
class WeaponProfile:
    weapon_class: WeaponClass
    strength: WeaponStrength
    damage: StatValue
    range: int | None = None
    attacks: StatValue | None = None
    armour_penetration: int = 0
    abilities: tuple[Ability, ...] = ()


@dataclass(frozen=True)
class Weapon:
    name: str
    profile: WeaponProfile
    count: int = 1


@dataclass(frozen=True)
class PsykerProfile:
    casts: int = 0
    deny: int = 0
    powers_known: str | None = None
    other: str | None = None


@dataclass(frozen=True)
class PsychicPower:
    name: str
    range: int = 0
    warp_charge: int = 0
    description: str = ""


@dataclass(frozen=True)
class Model:
    name: str
    profiles: tuple[ModelProfile, ...]
    weapons: tuple[Weapon, ...] = ()
    count: int = 1
    keywords: tuple[str, ...] = ()
    psyker: PsykerProfile | None = None
    psychic_powers: tuple[PsychicPower, ...] = ()
    abilities: tuple[Ability, ...] = ()


@dataclass(frozen=True)
class Unit:
    name: str
    models: tuple[Model, ...]
    keywords: tuple[str, ...] = ()
    rules: tuple[str, ...] = ()
    abilities: tuple[Ability, ...] = ()
    invulnerable_save: int | None = None
    points: float = 0.0
    role: str | None = None

    @property
    def model_count(self) -> int:
        return sum(model.count for model in self.models)


@dataclass(frozen=True)
class Detachment:
    name: str
    units: tuple[Unit, ...] = ()
    abilities: tuple[Ability, ...] = ()


@dataclass(frozen=True)
class Army:
    name: str
    detachments: tuple[Detachment, ...] = ()
    command_points: float = 0.0
    power_level: float = 0.0
    points: float = 0.0

    @property
    def units(self) -> tuple[Unit, ...]:
        return tuple(unit for detachment in self.detachments for unit in detachment.units)
