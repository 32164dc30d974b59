"""
Annual statistics ledgers (income, inflation, score, nation size).

The save keeps one yearly series per tag. A nation that switched tags has
its history spread over several series, so points are stitched together per
identity and labelled with the nation's latest tag. Years a nation has no
data for are filled with explicit None points so that line charts break the
line instead of interpolating across the gap.
"""

import logging
from dataclasses import dataclass
from itertools import groupby
from typing import TYPE_CHECKING

from .config import LEDGER_TAG_LIMIT, NATION_SIZE_TOP, STATISTICS
from .dates import Eu4Date
from .localization import LocalizedTag
from .nation_events import NationEvents
from .tag_filter import TagFilter, filter_tags

if TYPE_CHECKING:
    from .query import SaveQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerPoint:
    tag: str
    year: int
    value: int | None


@dataclass
class LocalizedLedger:
    points: list[LedgerPoint]
    localization: list[LocalizedTag]


@dataclass
class NationSizeHistory:
    tag: str
    year: int
    count: int


def nation_ledger(query: 'SaveQuery', nation: NationEvents,
                  ledger: dict[str, dict[int, int]]) -> list[LedgerPoint]:
    """Points of every tag the nation held, restricted to the years it held them."""
    years = sorted({year for tag in nation.tags() for year in ledger.get(tag, {})})
    points = []
    for year in years:
        # The tag held at the end of the year owns that year's entry
        tag = query.resolver.tag_at(nation.stored, Eu4Date(year, 12, 31))
        data = ledger.get(tag, {}) if tag else {}
        if year in data:
            points.append(LedgerPoint(nation.latest, year, data[year]))
    return points


def ledger_points(query: 'SaveQuery', statistic: str, tags: set[str]) -> list[LedgerPoint]:
    if statistic not in STATISTICS:
        raise ValueError(f"unknown statistic {statistic!r}, expected one of {STATISTICS}")

    ledger = query.save.ledger(statistic)
    points = []
    for tag in sorted(tags):
        nations = [n for n in query.nation_events if n.latest == tag]
        if not nations:
            # Tag switch shells and tags that never existed have no series of their own
            logger.debug("no nation currently tagged %s, skipping its %s ledger", tag, statistic)
            continue
        seen_years = set()
        for nation in nations:
            for point in nation_ledger(query, nation, ledger):
                if point.year not in seen_years:
                    seen_years.add(point.year)
                    points.append(point)
    return points


def fill_ledger_gaps(points: list[LedgerPoint]) -> list[LedgerPoint]:
    """Insert None points for the missing years between two points of the same tag.

    Returns points sorted by (year, tag). Running it again on its own output
    changes nothing.
    """
    result = []
    for tag, series in groupby(sorted(points, key=lambda p: (p.tag, p.year)), key=lambda p: p.tag):
        previous = None
        for point in series:
            if previous is not None:
                for year in range(previous.year + 1, point.year):
                    result.append(LedgerPoint(tag, year, None))
            result.append(point)
            previous = point
    result.sort(key=lambda p: (p.year, p.tag))
    return result


def localize_ledger_points(query: 'SaveQuery', points: list[LedgerPoint]) -> LocalizedLedger:
    filled = fill_ledger_gaps(points)
    localization = [query.localizer.localize_tag(tag) for tag in sorted({p.tag for p in filled})]
    names = {loc.tag: loc.name for loc in localization}
    filled.sort(key=lambda p: (p.year, names[p.tag], p.tag))
    return LocalizedLedger(points=filled, localization=localization)


def annual_ledger(query: 'SaveQuery', statistic: str, payload: TagFilter,
                  limit: int = LEDGER_TAG_LIMIT) -> LocalizedLedger:
    """Gap filled yearly series of one statistic for the filtered countries."""
    tags = filter_tags(query, payload, limit)
    points = ledger_points(query, statistic, tags)
    logger.debug("%s ledger: %d points for %d tags", statistic, len(points), len(tags))
    return localize_ledger_points(query, points)


def nation_size_statistics(query: 'SaveQuery', top: int = NATION_SIZE_TOP) -> list[NationSizeHistory]:
    """The largest nations of every year, smallest first so the biggest stacks on top."""
    exploded = [
        (tag, year, value)
        for tag, data in query.save.ledger('nation_size').items()
        for year, value in data.items()
    ]
    exploded.sort(key=lambda x: (x[1], -x[2], x[0]))

    result = []
    for _, rows in groupby(exploded, key=lambda x: x[1]):
        cutoff = list(rows)[:top]
        cutoff.reverse()
        result.extend(NationSizeHistory(tag, year, count) for tag, year, count in cutoff)
    return result
