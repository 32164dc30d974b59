"""
War timelines reconstructed from war history logs.

A war's history is a dated log of sides joining and leaving plus battles.
The list view walks each log once for membership, battle count and the war
interval; the detail view walks it again to rebuild every battle with its
commanders. Event dates are not trusted to be sorted, so the war interval is
always the running min/max of every event date.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import NO_ENTITY_TAG, UNKNOWN_COMMANDER_STATS
from .dates import Eu4Date
from .losses import add_losses, create_losses
from .models import (ADD_ATTACKER, ADD_DEFENDER, BATTLE, LEADER, REMOVE_ATTACKER, REMOVE_DEFENDER,
                     RULER_KINDS, BattleSide, War)

if TYPE_CHECKING:
    from .query import SaveQuery

logger = logging.getLogger(__name__)

ATTACKER = 'attacker'
DEFENDER = 'defender'


class WarNotFoundError(LookupError):
    """Raised when get_war is asked for a war name that is not in the save."""


@dataclass
class WarSide:
    original: str
    original_name: str
    members: list[str]
    losses: list[int]


@dataclass
class WarSummary:
    name: str
    start_date: str
    end_date: str | None
    days: int
    attackers: WarSide
    defenders: WarSide
    battles: int


@dataclass
class BattleSideInfo:
    cavalry: int
    infantry: int
    artillery: int
    heavy_ship: int
    light_ship: int
    galley: int
    transport: int
    losses: int
    country: str
    country_name: str
    commander: str | None
    commander_stats: str | None


@dataclass
class BattleInfo:
    name: str
    date: str
    location: int
    attacker_won: bool
    attacker: BattleSideInfo
    defender: BattleSideInfo
    winner_alliance: float
    loser_alliance: float
    losses: int
    forces: int


@dataclass
class WarParticipantInfo:
    tag: str
    name: str
    losses: list[int]
    participation: float
    participation_percent: float
    joined: str | None
    exited: str | None


@dataclass
class WarInfo:
    battles: list[BattleInfo] = field(default_factory=list)
    attacker_participants: list[WarParticipantInfo] = field(default_factory=list)
    defender_participants: list[WarParticipantInfo] = field(default_factory=list)


@dataclass
class CountryWarCasualties:
    war: str
    losses: list[int]
    participation: float
    participation_percent: float
    start: str | None
    end: str | None


@dataclass
class CountryLosses:
    tag: str
    name: str
    losses: list[int]


@dataclass
class _Timeline:
    # Currently active members per side
    attackers: set[str] = field(default_factory=set)
    defenders: set[str] = field(default_factory=set)
    # Last side each tag joined, kept after it leaves
    side_of: dict[str, str] = field(default_factory=dict)
    joins: list[tuple[Eu4Date, str]] = field(default_factory=list)
    battles: int = 0
    start: Eu4Date | None = None
    end: Eu4Date | None = None


def is_malformed(war: War) -> bool:
    return not war.name or war.original_attacker == NO_ENTITY_TAG


def war_interval(war: War) -> tuple[Eu4Date | None, Eu4Date | None]:
    start = end = None
    for event in war.events:
        if start is None or event.date < start:
            start = event.date
        if end is None or event.date > end:
            end = event.date
    return start, end


def _walk(war: War) -> _Timeline:
    timeline = _Timeline()
    timeline.start, timeline.end = war_interval(war)
    for event in war.events:
        if event.kind == ADD_ATTACKER:
            timeline.defenders.discard(event.tag)
            timeline.attackers.add(event.tag)
            timeline.side_of[event.tag] = ATTACKER
            timeline.joins.append((event.date, event.tag))
        elif event.kind == ADD_DEFENDER:
            timeline.attackers.discard(event.tag)
            timeline.defenders.add(event.tag)
            timeline.side_of[event.tag] = DEFENDER
            timeline.joins.append((event.date, event.tag))
        elif event.kind == REMOVE_ATTACKER:
            timeline.attackers.discard(event.tag)
        elif event.kind == REMOVE_DEFENDER:
            timeline.defenders.discard(event.tag)
        elif event.kind == BATTLE:
            timeline.battles += 1
    return timeline


def _war_summary(query: 'SaveQuery', war: War, tags: set[str]) -> WarSummary | None:
    save = query.save
    timeline = _walk(war)
    if timeline.start is not None and timeline.start < save.start_date:
        return None

    start = timeline.start or save.start_date
    candidates = [(start, war.original_attacker), (start, war.original_defender)] + timeline.joins
    if not any(query.resolver.resolve(tag, date) in tags for date, tag in candidates):
        return None

    attacker_losses = create_losses(())
    defender_losses = create_losses(())
    for participant in war.participants:
        side = timeline.side_of.get(participant.tag)
        if side == ATTACKER:
            add_losses(attacker_losses, create_losses(participant.losses))
        elif side == DEFENDER:
            add_losses(defender_losses, create_losses(participant.losses))

    members = {ATTACKER: [], DEFENDER: []}
    for tag, side in timeline.side_of.items():
        members[side].append(tag)

    end = None if war.active else timeline.end
    localize = query.localize_country
    return WarSummary(
        name=war.name,
        start_date=start.iso_8601(),
        end_date=end.iso_8601() if end else None,
        days=start.days_until(end or save.date),
        battles=timeline.battles,
        attackers=WarSide(war.original_attacker, localize(war.original_attacker),
                          members[ATTACKER], attacker_losses),
        defenders=WarSide(war.original_defender, localize(war.original_defender),
                          members[DEFENDER], defender_losses),
    )


def wars(query: 'SaveQuery', tags: set[str]) -> list[WarSummary]:
    """Previous then active wars involving at least one of the given current tags."""
    result = []
    for war in query.save.previous_wars + query.save.active_wars:
        if is_malformed(war):
            logger.debug("dropping malformed war %r (attacker %s)", war.name, war.original_attacker)
            continue
        summary = _war_summary(query, war, tags)
        if summary is not None:
            result.append(summary)
    return result


def commander_stats(query: 'SaveQuery', date: Eu4Date, stored_tags, commander: str) -> str:
    """Stats of the most recent leader appointment named `commander` on or before date."""
    for tag in stored_tags:
        country = query.save.country(tag)
        if country is None:
            continue

        for merc in country.mercenary_leaders:
            if merc.name == commander:
                return merc.stats

        for event in reversed(country.history):
            if event.date > date:
                continue
            if event.kind == LEADER or event.kind in RULER_KINDS:
                if event.leader is not None and event.leader.name == commander:
                    return event.leader.stats

    return UNKNOWN_COMMANDER_STATS


def _battle_side(query: 'SaveQuery', side: BattleSide, stats: str | None) -> BattleSideInfo:
    return BattleSideInfo(
        cavalry=side.cavalry,
        infantry=side.infantry,
        artillery=side.artillery,
        heavy_ship=side.heavy_ship,
        light_ship=side.light_ship,
        galley=side.galley,
        transport=side.transport,
        losses=side.losses,
        country=side.country,
        country_name=query.localize_country(side.country),
        commander=side.commander,
        commander_stats=stats,
    )


def find_war(query: 'SaveQuery', name: str) -> War:
    for war in query.save.active_wars + query.save.previous_wars:
        if war.name == name:
            return war
    raise WarNotFoundError(name)


def get_war(query: 'SaveQuery', name: str) -> WarInfo:
    """Battles and per-side participants of a single war."""
    war = find_war(query, name)
    start, end = war_interval(war)

    # Active members by stored identity, for finding commanders' countries
    attackers: dict[str, None] = {}
    defenders: dict[str, None] = {}
    total_attackers = set()
    joined = {}
    exited = {}
    commanders = {}
    info = WarInfo()

    def stats_for(name: str | None, date: Eu4Date, members) -> str | None:
        if name is None:
            return None
        if name not in commanders:
            commanders[name] = commander_stats(query, date, list(members), name)
        return commanders[name]

    for event in war.events:
        if event.kind in (ADD_ATTACKER, ADD_DEFENDER, REMOVE_ATTACKER, REMOVE_DEFENDER):
            stored = query.resolver.lookup(event.tag, event.date).stored
        if event.kind == ADD_ATTACKER:
            attackers[stored] = None
            joined[event.tag] = event.date
            total_attackers.add(event.tag)
        elif event.kind == ADD_DEFENDER:
            defenders[stored] = None
            joined[event.tag] = event.date
        elif event.kind == REMOVE_ATTACKER:
            attackers.pop(stored, None)
            exited[event.tag] = event.date
        elif event.kind == REMOVE_DEFENDER:
            defenders.pop(stored, None)
            exited[event.tag] = event.date
        elif event.kind == BATTLE and event.battle is not None:
            battle = event.battle
            attacker = _battle_side(query, battle.attacker,
                                    stats_for(battle.attacker.commander, event.date, attackers))
            defender = _battle_side(query, battle.defender,
                                    stats_for(battle.defender.commander, event.date, defenders))
            info.battles.append(BattleInfo(
                name=battle.name,
                date=event.date.iso_8601(),
                location=battle.location,
                attacker_won=battle.attacker_won,
                attacker=attacker,
                defender=defender,
                winner_alliance=battle.winner_alliance,
                loser_alliance=battle.loser_alliance,
                losses=battle.attacker.losses + battle.defender.losses,
                forces=battle.attacker.forces + battle.defender.forces,
            ))

    total_attacker_participation = 0.0
    total_defender_participation = 0.0
    for participant in war.participants:
        if participant.tag in total_attackers:
            total_attacker_participation += participant.value
        else:
            total_defender_participation += participant.value

    for participant in war.participants:
        # Joining at the start or leaving at the end is reported as None
        join = joined.get(participant.tag)
        exit_ = exited.get(participant.tag)
        is_attacker = participant.tag in total_attackers
        total = total_attacker_participation if is_attacker else total_defender_participation
        record = WarParticipantInfo(
            tag=participant.tag,
            name=query.localize_country(participant.tag),
            losses=create_losses(participant.losses),
            participation=participant.value,
            participation_percent=participant.value / total if total else 0.0,
            joined=join.iso_8601() if join is not None and start is not None and start < join else None,
            exited=exit_.iso_8601() if exit_ is not None and end is not None and exit_ < end else None,
        )
        if is_attacker:
            info.attacker_participants.append(record)
        else:
            info.defender_participants.append(record)

    return info


def country_casualties(query: 'SaveQuery', tag: str) -> list[CountryWarCasualties]:
    """Losses of one country in every finished war it took part in."""
    result = []
    for war in query.save.previous_wars:
        participant = next((p for p in war.participants if p.tag == tag), None)
        if participant is None:
            continue
        total = sum(p.value for p in war.participants)
        start, end = war_interval(war)
        result.append(CountryWarCasualties(
            war=war.name,
            losses=create_losses(participant.losses),
            participation=participant.value,
            participation_percent=participant.value / total if total else 0.0,
            start=start.iso_8601() if start else None,
            end=end.iso_8601() if end else None,
        ))
    return result


def countries_war_losses(query: 'SaveQuery', tags: set[str]) -> list[CountryLosses]:
    return [
        CountryLosses(tag=country.active_tag, name=query.localize_country(country.active_tag),
                      losses=create_losses(country.losses))
        for country in query.save.countries.values()
        if country.active_tag in tags
    ]
