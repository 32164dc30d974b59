"""
Building counts over time, rebuilt from province construction toggles.

Provinces only record the dates a building was constructed (building=yes)
or demolished (building=no). Summing those toggles per year and carrying the
running total forward gives a dense yearly count for every building, which
is what a stacked area chart needs.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from itertools import groupby
from typing import TYPE_CHECKING

from .config import BUILDING_IDS
from .models import BUILDING, OWNER

if TYPE_CHECKING:
    from .query import SaveQuery

logger = logging.getLogger(__name__)


@dataclass
class BuildingCount:
    building: str
    name: str
    year: int
    count: int


@dataclass
class ProvinceHistoryEvent:
    date: str
    # Owner, Constructed or Demolished
    kind: str
    id: str
    name: str


def building_deltas(query: 'SaveQuery', building_ids=None) -> dict[tuple[str, int], int]:
    """Net constructions per (building, year) across all provinces."""
    ids = BUILDING_IDS if building_ids is None else frozenset(building_ids)
    start_year = query.save.start_date.year
    end_year = query.save.date.year

    deltas = defaultdict(int)
    for province in query.save.provinces.values():
        for event in province.history:
            if event.kind != BUILDING or event.building not in ids:
                continue
            year = min(max(event.date.year, start_year), end_year)
            deltas[(event.building, year)] += 1 if event.constructed else -1
    return dict(deltas)


def building_history(query: 'SaveQuery', building_ids=None) -> list[BuildingCount]:
    """One count per (building, year) from campaign start to the save year, no gaps."""
    start_year = query.save.start_date.year
    end_year = query.save.date.year
    deltas = building_deltas(query, building_ids)

    result = []
    for building, entries in groupby(sorted(deltas.items()), key=lambda x: x[0][0]):
        name = query.localizer.localize_building(building)
        total = 0
        year = start_year
        for (_, event_year), delta in entries:
            for y in range(year, event_year):
                result.append(BuildingCount(building, name, y, total))
            total += delta
            result.append(BuildingCount(building, name, event_year, total))
            year = event_year + 1
        for y in range(year, end_year + 1):
            result.append(BuildingCount(building, name, y, total))

    # Stacked charts draw the first building on top
    result.sort(key=lambda x: x.building, reverse=True)
    result.sort(key=lambda x: x.year)
    logger.debug("expanded %d building deltas into %d yearly counts", len(deltas), len(result))
    return result


def province_history(query: 'SaveQuery', province_id: int) -> list[ProvinceHistoryEvent] | None:
    """Dated owner changes and building toggles of one province."""
    province = query.save.provinces.get(province_id)
    if province is None:
        return None

    result = []
    for event in sorted(province.history, key=lambda e: e.date):
        if event.kind == OWNER:
            result.append(ProvinceHistoryEvent(
                date=event.date.iso_8601(), kind='Owner',
                id=event.tag, name=query.localize_country(event.tag),
            ))
        elif event.kind == BUILDING and event.building in BUILDING_IDS:
            result.append(ProvinceHistoryEvent(
                date=event.date.iso_8601(),
                kind='Constructed' if event.constructed else 'Demolished',
                id=event.building, name=query.localizer.localize_building(event.building),
            ))
    return result
