"""
Nation identity index and tag resolution.

Every country in a save is stored under one tag for the whole campaign, but
the tag it plays under changes with tag switches (Portugal -> Spain) and ends
with annexation. NationEvents records those transitions for one stored
identity and splits the campaign into half-open epochs, each owning a tag.
TagResolver indexes the epochs of all identities by tag so that a historical
tag plus a date can be mapped back to the identity that held it.

Resolution returns the identity's latest tag: a war fought by POR in 1460
is reported for SPA when Portugal later became Spain. Ledger lookups that
need the tag in force at a date use NationEvents.tag_at instead.
"""

import bisect
import logging
from dataclasses import dataclass, field
from enum import Enum

from .dates import Eu4Date
from .models import ANNEXED, CHANGED_TAG_FROM, OWNER, Country, SaveGame

logger = logging.getLogger(__name__)


class NationEventKind(Enum):
    INITIAL = 'initial'
    TAG_SWITCH = 'tag_switch'
    ANNEXED = 'annexed'


@dataclass(frozen=True)
class NationEvent:
    date: Eu4Date
    kind: NationEventKind
    # None for annexation
    tag: str | None = None


@dataclass(frozen=True)
class Epoch:
    tag: str
    start: Eu4Date
    # Exclusive; None while the epoch is still running
    end: Eu4Date | None

    def contains(self, date: Eu4Date) -> bool:
        return self.start <= date and (self.end is None or date < self.end)


@dataclass(frozen=True)
class NationEvents:
    stored: str
    events: tuple[NationEvent, ...] = field(default_factory=tuple)

    @property
    def initial(self) -> str:
        return self.events[0].tag if self.events else self.stored

    @property
    def latest(self) -> str:
        """The last tag the nation played under (annexation keeps the previous tag)."""
        for event in reversed(self.events):
            if event.tag is not None:
                return event.tag
        return self.stored

    @property
    def annexed(self) -> Eu4Date | None:
        if self.events and self.events[-1].kind is NationEventKind.ANNEXED:
            return self.events[-1].date
        return None

    def epochs(self) -> list[Epoch]:
        result = []
        for i, event in enumerate(self.events):
            if event.tag is None:
                continue
            end = self.events[i + 1].date if i + 1 < len(self.events) else None
            result.append(Epoch(event.tag, event.date, end))
        return result

    def tag_at(self, date: Eu4Date) -> str | None:
        """The tag held at the given date, or None outside the nation's lifetime."""
        for epoch in self.epochs():
            if epoch.contains(date):
                return epoch.tag
        return None

    def tags(self) -> list[str]:
        seen = []
        for event in self.events:
            if event.tag is not None and event.tag not in seen:
                seen.append(event.tag)
        return seen

    def transitions(self) -> list[tuple[Eu4Date, str]]:
        return [(e.date, e.tag) for e in self.events if e.tag is not None]


@dataclass(frozen=True)
class ResolvedTag:
    tag: str
    stored: str
    current: str
    # False when no epoch matched and the input tag was passed through
    resolved: bool


def _switches(country: Country) -> list[tuple[Eu4Date, str]]:
    switches = [(e.date, e.tag) for e in country.history if e.kind == CHANGED_TAG_FROM and e.tag]
    switches.sort(key=lambda x: x[0])
    return switches


def _ownership_changes(save: SaveGame) -> list[tuple[Eu4Date, str | None, str]]:
    """(date, previous owner, new owner) across all provinces."""
    changes = []
    for province in save.provinces.values():
        owner = province.initial_owner
        events = sorted((e for e in province.history if e.kind == OWNER), key=lambda e: e.date)
        for event in events:
            if event.tag != owner:
                changes.append((event.date, owner, event.tag))
                owner = event.tag
    changes.sort(key=lambda x: x[0])
    return changes


def _initial_events(country: Country, start: Eu4Date) -> list[NationEvent]:
    switches = _switches(country)
    if not switches:
        return [NationEvent(start, NationEventKind.INITIAL, country.active_tag)]

    # changed_tag_from at date D records the tag held until D
    events = [NationEvent(start, NationEventKind.INITIAL, switches[0][1])]
    for i, (date, _from_tag) in enumerate(switches):
        to_tag = switches[i + 1][1] if i + 1 < len(switches) else country.active_tag
        events.append(NationEvent(date, NationEventKind.TAG_SWITCH, to_tag))
    return events


def _tag_at(events: list[NationEvent], date: Eu4Date) -> str | None:
    return NationEvents('', tuple(events)).tag_at(date)


def build_nation_events(save: SaveGame) -> list[NationEvents]:
    """Build one NationEvents record per stored identity in the save."""
    start = save.start_date
    changes = _ownership_changes(save)
    initial_owners = {p.initial_owner for p in save.provinces.values() if p.initial_owner}
    owners_ever = initial_owners | {new for _, _, new in changes}

    drafts = {tag: _initial_events(country, start) for tag, country in save.countries.items()}
    switched_initials = {
        events[0].tag for tag, events in drafts.items() if len(events) > 1
    }

    result = []
    for tag, country in save.countries.items():
        events = drafts[tag]
        has_switches = len(events) > 1
        held = {e.tag for e in events}

        if not country.is_alive and not has_switches:
            # The stored shell of a tag another identity switched away from
            if tag in switched_initials:
                logger.debug("skipping tag switch shell %s", tag)
                continue
            # Formable or releasable tag that never existed
            if save.provinces and not held & owners_ever and not country.history:
                continue

        # Nations released mid campaign appear when they first gain land
        if save.provinces and events[0].tag not in initial_owners:
            first_gain = next((d for d, _, new in changes if new == events[0].tag), None)
            if first_gain is not None and (len(events) == 1 or first_gain < events[1].date):
                events[0] = NationEvent(first_gain, NationEventKind.INITIAL, events[0].tag)

        annexed = [e.date for e in country.history if e.kind == ANNEXED]
        if not annexed and not country.is_alive and save.provinces:
            lost = [d for d, prev, _ in changes if prev is not None and prev == _tag_at(events, d)]
            annexed = lost[-1:]
        if annexed:
            date = max(annexed)
            if date >= events[-1].date:
                events.append(NationEvent(date, NationEventKind.ANNEXED))

        result.append(NationEvents(stored=tag, events=tuple(events)))

    logger.debug("built nation events for %d identities", len(result))
    return result


class TagResolver:
    """Interval index of (tag, valid_from, valid_to) epochs across all identities."""

    def __init__(self, nation_events: list[NationEvents]):
        intervals = []
        for nation in nation_events:
            latest = nation.latest
            for epoch in nation.epochs():
                intervals.append((epoch.tag, epoch.start, epoch.end, nation.stored, latest))
        intervals.sort(key=lambda x: (x[0], x[1]))
        self._intervals = intervals
        self._keys = [(tag, start) for tag, start, _, _, _ in intervals]
        self._by_stored = {n.stored: n for n in nation_events}

    def __len__(self):
        return len(self._intervals)

    def lookup(self, tag: str, date: Eu4Date) -> ResolvedTag:
        """Find the identity whose epoch for tag contains date."""
        i = bisect.bisect_right(self._keys, (tag, date)) - 1
        while i >= 0 and self._intervals[i][0] == tag:
            _, start, end, stored, latest = self._intervals[i]
            if start <= date and (end is None or date < end):
                return ResolvedTag(tag=tag, stored=stored, current=latest, resolved=True)
            i -= 1
        return ResolvedTag(tag=tag, stored=tag, current=tag, resolved=False)

    def resolve(self, tag: str, date: Eu4Date) -> str:
        """Latest tag of the identity holding tag at date; the input tag when none did."""
        return self.lookup(tag, date).current

    def nation(self, stored: str) -> NationEvents | None:
        return self._by_stored.get(stored)

    def tag_at(self, stored: str, date: Eu4Date) -> str | None:
        nation = self._by_stored.get(stored)
        return nation.tag_at(date) if nation else None
