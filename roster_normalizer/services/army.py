from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from .. import config
from ..errors import UnknownCostType, error_context
from ..models import Army
from ..schemas import Cost, Roster
from .selections import detachment_from_force

logger = logging.getLogger(__name__)


def _cost_fields() -> dict[str, str]:
    return {
        config.POWER_LEVEL_COST_TYPE: "power_level",
        config.COMMAND_POINTS_COST_TYPE: "command_points",
        config.POINTS_COST_TYPE: "points",
    }


def roster_totals(costs: Sequence[Cost]) -> dict[str, float]:
    fields = _cost_fields()
    totals = dict.fromkeys(fields.values(), 0.0)
    for cost in costs:
        field = fields.get(cost.type_id)
        if field is None:
            raise UnknownCostType(cost.type_id, cost.name)
        totals[field] = cost.value
    return totals


def army_from_roster(roster: Roster | Mapping[str, Any]) -> Army:
    """Normalize a whole roster document into an :class:`Army`.

    Accepts either a validated :class:`Roster` or the raw document mapping.
    Any data error aborts the build; no partial army is returned.
    """
    if not isinstance(roster, Roster):
        roster = Roster.from_document(roster)

    with error_context(roster.name):
        totals = roster_totals(roster.costs)
        detachments = tuple(detachment_from_force(force) for force in roster.forces)

    army = Army(name=roster.name, detachments=detachments, **totals)
    logger.info(
        "Normalized roster %r: %d detachments, %d units, %.0f pts",
        army.name,
        len(army.detachments),
        len(army.units),
        army.points,
    )
    return army
