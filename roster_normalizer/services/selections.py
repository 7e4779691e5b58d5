"""Recursive assembly of models, units and detachments from roster selections."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Sequence

from .. import config
from ..data.lexicon import (
    ABILITIES_PROFILE,
    CONFIGURATION_CATEGORY,
    DETACHMENT_ABILITY_PROFILES,
    MODEL_SELECTION,
    PSYCHIC_POWER_PROFILE,
    PSYKER_PROFILE,
    STAT_DAMAGE_PROFILE,
    STRATAGEMS_CATEGORY,
    UNIT_PROFILE,
    UNIT_SELECTION,
    UPGRADE_SELECTION,
    WEAPON_PROFILE,
)
from ..errors import (
    MissingProfile,
    UnhandledProfileType,
    UnknownSelectionType,
    error_context,
)
from ..models import (
    Ability,
    Detachment,
    Model,
    ModelProfile,
    PsychicPower,
    PsykerProfile,
    Unit,
    Weapon,
)
from ..schemas import Force, Profile, Selection
from .characteristics import (
    parse_ability,
    parse_model_profile,
    parse_psychic_power,
    parse_psyker_profile,
    parse_weapon_profile,
)
from .utils import dedupe_sorted, merge_weapons

logger = logging.getLogger(__name__)

_INVULNERABLE_PHRASE = "invulnerable save"


def walk_selections(selection: Selection) -> Iterator[Selection]:
    yield selection
    for child in selection.selections:
        yield from walk_selections(child)


def total_points(selection: Selection) -> float:
    """Points of a selection: its own ``pts`` costs plus all of its children's."""
    own = [cost.value for cost in selection.costs if cost.name == config.POINTS_COST_NAME]
    children = [total_points(child) for child in selection.selections]
    return math.fsum(own + children)


def collect_keywords(selection: Selection) -> tuple[str, ...]:
    return dedupe_sorted(
        category.name
        for node in walk_selections(selection)
        for category in node.categories
    )


def collect_rules(selection: Selection) -> tuple[str, ...]:
    return dedupe_sorted(
        rule.name for node in walk_selections(selection) for rule in node.rules
    )


def merge_stat_override(base: ModelProfile, override: ModelProfile) -> ModelProfile:
    """Combine a base stat line with one damage tier.

    Movement and weapon/ballistic skill are additive, wounds come from the
    tier, attacks from the tier only when the base left them empty, and the
    remaining characteristics stay as in the base line.
    """
    return ModelProfile(
        name=override.name or base.name,
        movement=base.movement + override.movement,
        min_movement=base.min_movement + override.min_movement,
        weapon_skill=base.weapon_skill + override.weapon_skill,
        ballistic_skill=base.ballistic_skill + override.ballistic_skill,
        strength=base.strength,
        toughness=base.toughness,
        wounds=override.wounds,
        attacks=override.attacks if base.attacks.is_empty else base.attacks,
        leadership=base.leadership,
        save=base.save,
    )


def _roll_before(text: str, end: int) -> int | None:
    prefix = text[:end].rstrip()
    if not prefix.endswith("+"):
        return None
    digits_end = len(prefix) - 1
    start = digits_end
    while start > 0 and "0" <= prefix[start - 1] <= "9":
        start -= 1
    if start == digits_end:
        return None
    return int(prefix[start:digits_end])


def invulnerable_save_from(abilities: Iterable[Ability]) -> int | None:
    best: int | None = None
    for ability in abilities:
        lowered = ability.description.lower()
        start = lowered.find(_INVULNERABLE_PHRASE)
        while start != -1:
            roll = _roll_before(ability.description, start)
            if roll is not None and (best is None or roll < best):
                best = roll
            start = lowered.find(_INVULNERABLE_PHRASE, start + 1)
    return best


def _weapon(profile: Profile, count: int) -> Weapon:
    return Weapon(
        name=profile.name,
        profile=parse_weapon_profile(profile.characteristics, profile.name),
        count=count,
    )


@dataclass
class _ModelParts:
    name: str
    profiles: list[ModelProfile] = field(default_factory=list)
    base: ModelProfile | None = None
    weapons: list[Weapon] = field(default_factory=list)
    psyker: PsykerProfile | None = None
    psychic_powers: list[PsychicPower] = field(default_factory=list)
    abilities: list[Ability] = field(default_factory=list)

    def add_base(self, profile: ModelProfile) -> None:
        self.profiles.append(profile)
        self.base = profile

    def add_override(self, profile: ModelProfile) -> None:
        if self.base is None:
            raise MissingProfile(self.name, "damage tier without a base profile")
        self.profiles.append(merge_stat_override(self.base, profile))

    def read_own_profile(self, profile: Profile) -> None:
        if profile.type_name == UNIT_PROFILE:
            self.add_base(parse_model_profile(profile.characteristics, profile.name))
        elif profile.type_name == PSYKER_PROFILE:
            self.psyker = parse_psyker_profile(profile.characteristics, profile.name)
        elif profile.type_name == ABILITIES_PROFILE:
            self.abilities.append(parse_ability(profile.characteristics, profile.name))
        else:
            raise UnhandledProfileType(profile.type_name, "model")

    def read_upgrade(self, selection: Selection) -> None:
        with error_context(selection.name):
            if selection.type != UPGRADE_SELECTION:
                raise UnknownSelectionType(selection.type, "model")
            for profile in selection.profiles:
                if profile.type_name == WEAPON_PROFILE:
                    self.weapons.append(_weapon(profile, selection.number))
                elif profile.type_name == PSYCHIC_POWER_PROFILE:
                    self.psychic_powers.append(
                        parse_psychic_power(profile.characteristics, profile.name)
                    )
                elif profile.type_name == ABILITIES_PROFILE:
                    self.abilities.append(
                        parse_ability(profile.characteristics, profile.name)
                    )
                elif profile.type_name == STAT_DAMAGE_PROFILE:
                    self.add_override(
                        parse_model_profile(profile.characteristics, profile.name)
                    )
                else:
                    raise UnhandledProfileType(profile.type_name, "upgrade")
            for child in selection.selections:
                self.read_upgrade(child)


def _shared_profile_for(name: str, shared_profiles: Sequence[Profile]) -> Profile | None:
    for profile in shared_profiles:
        if profile.name == name:
            return profile
    if len(shared_profiles) == 1:
        return shared_profiles[0]
    return None


def model_from_selection(
    selection: Selection, shared_profiles: Sequence[Profile] = ()
) -> Model:
    """Build one model from a ``model`` selection.

    ``shared_profiles`` are stat lines declared on the enclosing unit; they are
    only used when the model carries no stat line of its own.
    """
    with error_context(selection.name):
        if selection.type != MODEL_SELECTION:
            raise UnknownSelectionType(selection.type, "model")
        parts = _ModelParts(name=selection.name)
        for profile in selection.profiles:
            parts.read_own_profile(profile)
        if parts.base is None:
            shared = _shared_profile_for(selection.name, shared_profiles)
            if shared is not None:
                parts.add_base(parse_model_profile(shared.characteristics, shared.name))
        for child in selection.selections:
            parts.read_upgrade(child)
        if not parts.profiles:
            raise MissingProfile(selection.name, "model has no Unit profile")

        return Model(
            name=selection.name,
            profiles=tuple(parts.profiles),
            weapons=merge_weapons(parts.weapons),
            count=selection.number,
            keywords=collect_keywords(selection),
            psyker=parts.psyker,
            psychic_powers=tuple(parts.psychic_powers),
            abilities=tuple(parts.abilities),
        )


def _read_unit_upgrade(
    selection: Selection, weapons: list[Weapon], abilities: list[Ability]
) -> None:
    with error_context(selection.name):
        if selection.type != UPGRADE_SELECTION:
            raise UnknownSelectionType(selection.type, "unit upgrade")
        for profile in selection.profiles:
            if profile.type_name == WEAPON_PROFILE:
                weapons.append(_weapon(profile, selection.number))
            elif profile.type_name == ABILITIES_PROFILE:
                abilities.append(parse_ability(profile.characteristics, profile.name))
            else:
                raise UnhandledProfileType(profile.type_name, "unit upgrade")
        for child in selection.selections:
            _read_unit_upgrade(child, weapons, abilities)


def _unit_models(selection: Selection) -> tuple[tuple[Model, ...], tuple[Ability, ...]]:
    shared_profiles: list[Profile] = []
    unit_weapons: list[Weapon] = []
    abilities: list[Ability] = []

    for profile in selection.profiles:
        if profile.type_name == UNIT_PROFILE:
            shared_profiles.append(profile)
        elif profile.type_name == WEAPON_PROFILE:
            unit_weapons.append(_weapon(profile, selection.number))
        elif profile.type_name == ABILITIES_PROFILE:
            abilities.append(parse_ability(profile.characteristics, profile.name))
        else:
            raise UnhandledProfileType(profile.type_name, "unit")

    model_selections: list[Selection] = []
    for child in selection.selections:
        if child.type == MODEL_SELECTION:
            model_selections.append(child)
        elif child.type == UPGRADE_SELECTION:
            _read_unit_upgrade(child, unit_weapons, abilities)
        else:
            raise UnknownSelectionType(child.type, "unit")
    if not model_selections:
        raise MissingProfile(selection.name, "unit has no model selections")

    models: list[Model] = []
    for child in model_selections:
        model = model_from_selection(child, shared_profiles)
        if unit_weapons:
            model = replace(model, weapons=merge_weapons([*model.weapons, *unit_weapons]))
        models.append(model)
    return tuple(models), tuple(abilities)


def _primary_category(selection: Selection) -> str | None:
    for category in selection.categories:
        if category.primary:
            return category.name
    return None


def unit_from_selection(selection: Selection) -> Unit:
    with error_context(selection.name):
        if selection.type == MODEL_SELECTION:
            models: tuple[Model, ...] = (model_from_selection(selection),)
            abilities: tuple[Ability, ...] = ()
        elif selection.type == UNIT_SELECTION:
            models, abilities = _unit_models(selection)
        else:
            raise UnknownSelectionType(selection.type, "unit")

    model_abilities = [ability for model in models for ability in model.abilities]
    unit = Unit(
        name=selection.name,
        models=models,
        keywords=collect_keywords(selection),
        rules=collect_rules(selection),
        abilities=abilities,
        invulnerable_save=invulnerable_save_from([*abilities, *model_abilities]),
        points=total_points(selection),
        role=_primary_category(selection),
    )
    logger.debug(
        "Built unit %s: %d models, %.0f pts", unit.name, unit.model_count, unit.points
    )
    return unit


def _ability_profiles(profiles: Sequence[Profile], where: str) -> list[Ability]:
    abilities: list[Ability] = []
    for profile in profiles:
        if profile.type_name not in DETACHMENT_ABILITY_PROFILES:
            raise UnhandledProfileType(profile.type_name, where)
        abilities.append(parse_ability(profile.characteristics, profile.name))
    return abilities


def _configuration_abilities(selection: Selection) -> list[Ability]:
    with error_context(selection.name):
        if selection.type != UPGRADE_SELECTION:
            raise UnknownSelectionType(selection.type, "configuration")
        abilities = _ability_profiles(selection.profiles, "configuration")
        for child in selection.selections:
            abilities.extend(_configuration_abilities(child))
        return abilities


def _detachment_abilities(selection: Selection) -> list[Ability]:
    categories = {category.name for category in selection.categories}
    abilities: list[Ability] = []
    if CONFIGURATION_CATEGORY in categories:
        abilities.extend(_configuration_abilities(selection))
    if STRATAGEMS_CATEGORY in categories:
        with error_context(selection.name):
            abilities.extend(_ability_profiles(selection.profiles, "stratagem"))
    if not categories & {CONFIGURATION_CATEGORY, STRATAGEMS_CATEGORY}:
        logger.debug(
            "Skipping detachment upgrade %s (categories: %s)",
            selection.name,
            ", ".join(sorted(categories)) or "none",
        )
    return abilities


def detachment_from_force(force: Force) -> Detachment:
    abilities: list[Ability] = []
    units: list[Unit] = []
    with error_context(force.name):
        for selection in force.selections:
            if selection.type == UPGRADE_SELECTION:
                abilities.extend(_detachment_abilities(selection))
            elif selection.type in {MODEL_SELECTION, UNIT_SELECTION}:
                units.append(unit_from_selection(selection))
            else:
                raise UnknownSelectionType(selection.type, "force")
    return Detachment(name=force.name, units=tuple(units), abilities=tuple(abilities))
