from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from roster_normalizer.errors import (
    MissingProfile,
    RosterDataError,
    UnhandledProfileType,
    UnknownSelectionType,
)
from roster_normalizer.models import Ability
from roster_normalizer.schemas import Selection
from roster_normalizer.services.selections import (
    invulnerable_save_from,
    total_points,
    unit_from_selection,
)

GUARDSMAN = {
    "M": '6"', "WS": "4+", "BS": "4+", "S": "3", "T": "3",
    "W": "1", "A": "1", "Ld": "6", "Save": "5+",
}
SERGEANT = dict(GUARDSMAN, A="2", Ld="7")
LASGUN = {"Range": '24"', "Type": "Rapid Fire 1", "S": "3", "AP": "0", "D": "1", "Abilities": "-"}
FRAG = {"Range": '6"', "Type": "Grenade D6", "S": "3", "AP": "0", "D": "1", "Abilities": "Blast"}


def _profile(name: str, type_name: str, values: dict[str, str]) -> dict[str, Any]:
    return {
        "name": name,
        "typeName": type_name,
        "characteristics": [{"name": key, "value": value} for key, value in values.items()],
    }


def _pts(value: float) -> list[dict[str, Any]]:
    return [{"name": "pts", "typeId": "points", "value": value}]


def _infantry_squad(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Infantry Squad",
        "type": "unit",
        "number": 1,
        "categories": [
            {"name": "Troops", "primary": True},
            {"name": "Infantry"},
            {"name": "Faction: Astra Militarum"},
        ],
        "rules": [{"name": "Combined Squad"}, {"name": "Born Soldiers"}],
        "costs": _pts(0),
        "profiles": [
            _profile("Guardsman", "Unit", GUARDSMAN),
            _profile("Sergeant", "Unit", SERGEANT),
        ],
        "selections": [
            {
                "name": "Sergeant",
                "type": "model",
                "number": 1,
                "costs": _pts(6),
                "rules": [{"name": "Born Soldiers"}],
            },
            {
                "name": "Guardsman",
                "type": "model",
                "number": 9,
                "costs": _pts(54),
                "selections": [
                    {
                        "name": "Lasgun",
                        "type": "upgrade",
                        "number": 9,
                        "profiles": [_profile("Lasgun", "Weapon", LASGUN)],
                    }
                ],
            },
            {
                "name": "Frag grenades",
                "type": "upgrade",
                "number": 1,
                "profiles": [_profile("Frag grenades", "Weapon", FRAG)],
            },
        ],
    }
    payload.update(overrides)
    return payload


def test_infantry_squad_models_and_points():
    unit = unit_from_selection(Selection.model_validate(_infantry_squad()))

    assert unit.name == "Infantry Squad"
    assert [model.name for model in unit.models] == ["Sergeant", "Guardsman"]
    assert unit.model_count == 10
    assert unit.points == 60
    assert unit.role == "Troops"


def test_shared_unit_profiles_are_matched_by_model_name():
    unit = unit_from_selection(Selection.model_validate(_infantry_squad()))
    sergeant, guardsman = unit.models

    assert sergeant.profiles[0].name == "Sergeant"
    assert sergeant.profiles[0].leadership == 7
    assert guardsman.profiles[0].name == "Guardsman"
    assert guardsman.profiles[0].leadership == 6


def test_unit_level_weapons_are_given_to_every_model():
    unit = unit_from_selection(Selection.model_validate(_infantry_squad()))
    sergeant, guardsman = unit.models

    assert [(weapon.name, weapon.count) for weapon in sergeant.weapons] == [("Frag grenades", 1)]
    assert [(weapon.name, weapon.count) for weapon in guardsman.weapons] == [
        ("Lasgun", 9),
        ("Frag grenades", 1),
    ]


def test_keywords_and_rules_are_collected_from_the_whole_tree():
    unit = unit_from_selection(Selection.model_validate(_infantry_squad()))

    assert unit.keywords == ("Faction: Astra Militarum", "Infantry", "Troops")
    assert unit.rules == ("Born Soldiers", "Combined Squad")
    assert list(unit.keywords) == sorted(set(unit.keywords))


def test_points_do_not_depend_on_selection_order():
    payload = _infantry_squad()
    reversed_payload = dict(payload, selections=list(reversed(payload["selections"])))

    forward = Selection.model_validate(payload)
    backward = Selection.model_validate(reversed_payload)

    assert total_points(forward) == total_points(backward) == 60


def test_points_ignore_other_cost_names():
    payload = _infantry_squad(
        costs=[
            {"name": "pts", "typeId": "points", "value": 5},
            {"name": " PL", "typeId": "e356-c769-5920-6e14", "value": 3},
            {"name": "CP", "typeId": "2d3b-b544-ad49-fb75", "value": -1},
        ]
    )

    assert total_points(Selection.model_validate(payload)) == 65


def test_single_model_character_is_a_unit():
    selection = Selection.model_validate(
        {
            "name": "Company Commander",
            "type": "model",
            "categories": [{"name": "HQ", "primary": True}, {"name": "Character"}],
            "costs": _pts(45),
            "profiles": [
                _profile("Company Commander", "Unit", dict(GUARDSMAN, W="3", A="3")),
                _profile("Refractor Field", "Abilities",
                         {"Description": "This model has a 5+ invulnerable save."}),
            ],
        }
    )

    unit = unit_from_selection(selection)

    assert unit.model_count == 1
    assert unit.models[0].abilities[0].name == "Refractor Field"
    assert unit.abilities == ()
    assert unit.invulnerable_save == 5
    assert unit.points == 45
    assert unit.role == "HQ"


def test_unit_abilities_and_upgrade_abilities():
    payload = _infantry_squad()
    payload["profiles"].append(
        _profile("Voice of Command", "Abilities", {"Description": "Issue orders."})
    )
    payload["selections"].append(
        {
            "name": "Vox-caster",
            "type": "upgrade",
            "number": 1,
            "costs": _pts(5),
            "profiles": [_profile("Vox-caster", "Abilities", {"Description": "Extends order range."})],
        }
    )

    unit = unit_from_selection(Selection.model_validate(payload))

    assert [ability.name for ability in unit.abilities] == ["Voice of Command", "Vox-caster"]
    assert unit.points == 65
    assert unit.invulnerable_save is None


def test_invulnerable_save_takes_the_best_roll():
    abilities = [
        Ability("Ion Shield", "This model has a 5+ invulnerable save against ranged attacks."),
        Ability("Storm Shield", "The bearer has a 4+ Invulnerable Save."),
        Ability("Orders", "No save mentioned here."),
    ]

    assert invulnerable_save_from(abilities) == 4
    assert invulnerable_save_from([]) is None
    assert invulnerable_save_from([Ability("Vague", "Has an invulnerable save.")]) is None


def test_unit_without_models_fails():
    payload = _infantry_squad(selections=[])

    with pytest.raises(MissingProfile):
        unit_from_selection(Selection.model_validate(payload))


def test_unknown_child_selection_type():
    payload = _infantry_squad()
    payload["selections"].append({"name": "Mystery", "type": "detachment"})

    with pytest.raises(UnknownSelectionType) as excinfo:
        unit_from_selection(Selection.model_validate(payload))

    assert excinfo.value.selection_type == "detachment"
    assert excinfo.value.path == ["Infantry Squad"]


def test_unknown_root_selection_type():
    with pytest.raises(UnknownSelectionType):
        unit_from_selection(Selection.model_validate({"name": "Thing", "type": "force"}))


def test_unhandled_profile_type_on_unit():
    payload = _infantry_squad()
    payload["profiles"].append(_profile("Transport", "Transport", {"Capacity": "12"}))

    with pytest.raises(UnhandledProfileType):
        unit_from_selection(Selection.model_validate(payload))


def test_deep_error_reports_the_selection_path():
    payload = _infantry_squad()
    guardsman = payload["selections"][1]
    guardsman["selections"][0]["profiles"] = [
        _profile("Lasgun", "Weapon", dict(LASGUN, D="D7"))
    ]

    with pytest.raises(RosterDataError) as excinfo:
        unit_from_selection(Selection.model_validate(payload))

    assert excinfo.value.path == ["Infantry Squad", "Guardsman", "Lasgun"]
    assert str(excinfo.value).endswith("(in Infantry Squad > Guardsman > Lasgun)")
