"""
Immutable EU4 save model.

The queries in this package only ever read these records. load_save maps the
dictionary produced by the Clausewitz parser into them; callers that already
have a parsed save can build the records directly.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .config import EU4_START_DATE, NO_ENTITY_TAG
from .dates import Eu4Date
from .parser import Block

logger = logging.getLogger(__name__)

# Country history event kinds
CHANGED_TAG_FROM = 'changed_tag_from'
ANNEXED = 'annexed'
LEADER = 'leader'
MONARCH = 'monarch'
HEIR = 'heir'
QUEEN = 'queen'
RULER_KINDS = (MONARCH, HEIR, QUEEN)

# Province history event kinds
OWNER = 'owner'
BUILDING = 'building'

# War history event kinds
ADD_ATTACKER = 'add_attacker'
ADD_DEFENDER = 'add_defender'
REMOVE_ATTACKER = 'remove_attacker'
REMOVE_DEFENDER = 'remove_defender'
BATTLE = 'battle'
WAR_EVENT_KINDS = (ADD_ATTACKER, ADD_DEFENDER, REMOVE_ATTACKER, REMOVE_DEFENDER, BATTLE)
# Saves write the removals in short form
WAR_EVENT_ALIASES = {'rem_attacker': REMOVE_ATTACKER, 'rem_defender': REMOVE_DEFENDER}


@dataclass(frozen=True)
class Leader:
    name: str
    fire: int = 0
    shock: int = 0
    manuever: int = 0
    siege: int = 0

    @property
    def stats(self) -> str:
        return f"({self.fire} / {self.shock} / {self.manuever} / {self.siege})"


@dataclass(frozen=True)
class CountryEvent:
    date: Eu4Date
    kind: str
    tag: str | None = None
    # Set for leader events, and for rulers that also lead armies
    leader: Leader | None = None


@dataclass(frozen=True)
class Country:
    tag: str
    current_tag: str | None = None
    name: str | None = None
    human: bool = False
    num_of_cities: int = 0
    history: tuple[CountryEvent, ...] = ()
    mercenary_leaders: tuple[Leader, ...] = ()
    losses: tuple[int, ...] = ()

    @property
    def active_tag(self) -> str:
        return self.current_tag or self.tag

    @property
    def is_alive(self) -> bool:
        return self.num_of_cities > 0


@dataclass(frozen=True)
class ProvinceEvent:
    date: Eu4Date
    kind: str
    tag: str | None = None
    building: str | None = None
    constructed: bool = False


@dataclass(frozen=True)
class Province:
    id: int
    name: str = ''
    initial_owner: str | None = None
    history: tuple[ProvinceEvent, ...] = ()


@dataclass(frozen=True)
class BattleSide:
    country: str = NO_ENTITY_TAG
    cavalry: int = 0
    infantry: int = 0
    artillery: int = 0
    heavy_ship: int = 0
    light_ship: int = 0
    galley: int = 0
    transport: int = 0
    losses: int = 0
    commander: str | None = None

    @property
    def forces(self) -> int:
        return (self.infantry + self.cavalry + self.artillery + self.heavy_ship
                + self.light_ship + self.galley + self.transport)


@dataclass(frozen=True)
class Battle:
    name: str
    location: int = 0
    attacker_won: bool = False
    attacker: BattleSide = field(default_factory=BattleSide)
    defender: BattleSide = field(default_factory=BattleSide)
    winner_alliance: float = 0.0
    loser_alliance: float = 0.0


@dataclass(frozen=True)
class WarEvent:
    date: Eu4Date
    kind: str
    tag: str | None = None
    battle: Battle | None = None


@dataclass(frozen=True)
class WarParticipant:
    tag: str
    value: float = 0.0
    losses: tuple[int, ...] = ()


@dataclass(frozen=True)
class War:
    name: str
    original_attacker: str = NO_ENTITY_TAG
    original_defender: str = NO_ENTITY_TAG
    events: tuple[WarEvent, ...] = ()
    participants: tuple[WarParticipant, ...] = ()
    active: bool = False


@dataclass(frozen=True)
class SaveGame:
    date: Eu4Date
    start_date: Eu4Date = EU4_START_DATE
    countries: dict[str, Country] = field(default_factory=dict)
    provinces: dict[int, Province] = field(default_factory=dict)
    active_wars: tuple[War, ...] = ()
    previous_wars: tuple[War, ...] = ()
    # (player name, tag) pairs
    players: tuple[tuple[str, str], ...] = ()
    great_powers: tuple[str, ...] = ()
    # (overlord, subject) pairs
    subjects: tuple[tuple[str, str], ...] = ()
    # statistic name -> tag -> year -> value
    ledgers: dict[str, dict[str, dict[int, int]]] = field(default_factory=dict)

    def country(self, tag: str) -> Country | None:
        return self.countries.get(tag)

    def ledger(self, statistic: str) -> dict[str, dict[int, int]]:
        return self.ledgers.get(statistic, {})


def as_list(value: Any) -> list:
    """Normalize a value that the parser may have collapsed from a repeated key."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _pairs(block: dict) -> list[tuple[str, Any]]:
    """Assignments of a block in source order, repeated keys included."""
    if isinstance(block, Block):
        return block.pairs
    return [(key, value) for key, values in block.items() for value in as_list(values)]


def _dated_blocks(history: dict) -> list[tuple[Eu4Date, dict]]:
    """(date, block) pairs of a history block in log order, skipping undated keys."""
    result = []
    for key, block in _pairs(history):
        date = Eu4Date.try_parse(key)
        if date is not None and isinstance(block, dict):
            result.append((date, block))
    return result


def _losses(block: Any) -> tuple[int, ...]:
    if not isinstance(block, dict):
        return ()
    return tuple(_int(x) for x in as_list(block.get('members')))


def load_leader(data: dict) -> Leader:
    return Leader(
        name=str(data.get('name', '')),
        fire=_int(data.get('fire')),
        shock=_int(data.get('shock')),
        manuever=_int(data.get('manuever')),
        siege=_int(data.get('siege')),
    )


def load_country(tag: str, data: dict) -> Country:
    events = []
    for date, block in _dated_blocks(data.get('history') or {}):
        for from_tag in as_list(block.get(CHANGED_TAG_FROM)):
            events.append(CountryEvent(date, CHANGED_TAG_FROM, tag=str(from_tag)))
        if block.get(ANNEXED):
            events.append(CountryEvent(date, ANNEXED))
        for leader in as_list(block.get(LEADER)):
            if isinstance(leader, dict):
                events.append(CountryEvent(date, LEADER, leader=load_leader(leader)))
        for kind in RULER_KINDS:
            for ruler in as_list(block.get(kind)):
                if not isinstance(ruler, dict):
                    continue
                leader = ruler.get('leader')
                events.append(CountryEvent(
                    date, kind, leader=load_leader(leader) if isinstance(leader, dict) else None,
                ))

    mercs = []
    for company in as_list(data.get('mercenary_company')):
        if isinstance(company, dict) and isinstance(company.get('leader'), dict):
            mercs.append(load_leader(company['leader']))

    return Country(
        tag=tag,
        current_tag=tag,
        name=data.get('name') if isinstance(data.get('name'), str) else None,
        human=bool(data.get('human', False)),
        num_of_cities=_int(data.get('num_of_cities')),
        history=tuple(sorted(events, key=lambda e: e.date)),
        mercenary_leaders=tuple(mercs),
        losses=_losses(data.get('losses')),
    )


def load_province(key: str, data: dict) -> Province:
    history = data.get('history') or {}
    events = []
    for date, block in _dated_blocks(history):
        for key_name, value in _pairs(block):
            if key_name == OWNER:
                events.append(ProvinceEvent(date, OWNER, tag=str(value)))
            elif isinstance(value, bool):
                events.append(ProvinceEvent(date, BUILDING, building=key_name, constructed=value))

    initial = history.get(OWNER)
    return Province(
        id=abs(_int(key)),
        name=str(data.get('name', '')),
        initial_owner=str(initial) if initial is not None else None,
        history=tuple(sorted(events, key=lambda e: e.date)),
    )


def load_battle_side(data: Any) -> BattleSide:
    if not isinstance(data, dict):
        return BattleSide()
    commander = data.get('commander')
    return BattleSide(
        country=str(data.get('country', NO_ENTITY_TAG)),
        cavalry=_int(data.get('cavalry')),
        infantry=_int(data.get('infantry')),
        artillery=_int(data.get('artillery')),
        heavy_ship=_int(data.get('heavy_ship')),
        light_ship=_int(data.get('light_ship')),
        galley=_int(data.get('galley')),
        transport=_int(data.get('transport')),
        losses=_int(data.get('losses')),
        commander=str(commander) if commander else None,
    )


def load_battle(data: dict) -> Battle:
    return Battle(
        name=str(data.get('name', '')),
        location=_int(data.get('location')),
        attacker_won=bool(data.get('result', False)),
        attacker=load_battle_side(data.get('attacker')),
        defender=load_battle_side(data.get('defender')),
        winner_alliance=_float(data.get('winner_alliance')),
        loser_alliance=_float(data.get('loser_alliance')),
    )


def load_war(data: dict, active: bool) -> War:
    # Events keep log order; dates are not guaranteed to be sorted
    events = []
    for date, block in _dated_blocks(data.get('history') or {}):
        for key, value in _pairs(block):
            kind = WAR_EVENT_ALIASES.get(key, key)
            if kind == BATTLE:
                if isinstance(value, dict):
                    events.append(WarEvent(date, BATTLE, battle=load_battle(value)))
            elif kind in WAR_EVENT_KINDS:
                events.append(WarEvent(date, kind, tag=str(value)))

    participants = []
    for p in as_list(data.get('participants')):
        if isinstance(p, dict) and 'tag' in p:
            participants.append(WarParticipant(
                tag=str(p['tag']),
                value=_float(p.get('value')),
                losses=_losses(p.get('losses')),
            ))

    return War(
        name=str(data.get('name', '')),
        original_attacker=str(data.get('original_attacker', NO_ENTITY_TAG)),
        original_defender=str(data.get('original_defender', NO_ENTITY_TAG)),
        events=tuple(events),
        participants=tuple(participants),
        active=active,
    )


def load_ledger(data: Any) -> dict[str, dict[int, int]]:
    result = {}
    if not isinstance(data, dict):
        return result
    for entry in as_list(data.get('ledger_data')):
        if not isinstance(entry, dict) or 'name' not in entry:
            continue
        points = entry.get('data')
        if not isinstance(points, dict):
            continue
        result[str(entry['name'])] = {_int(year): _int(value) for year, value in points.items()}
    return result


def load_save(data: dict) -> SaveGame:
    """Map a parsed melted save into the immutable save model."""
    countries_block = data.get('countries') or {}
    countries = {
        tag: load_country(tag, block)
        for tag, block in countries_block.items()
        if isinstance(block, dict)
    }

    provinces = {}
    for key, block in (data.get('provinces') or {}).items():
        if isinstance(block, dict):
            province = load_province(key, block)
            provinces[province.id] = province

    # players_countries is a flat list of alternating player name and tag
    flat_players = [str(x) for x in as_list(data.get('players_countries'))]
    players = tuple(zip(flat_players[::2], flat_players[1::2]))

    great_powers = []
    gp_block = data.get('great_powers')
    if isinstance(gp_block, dict):
        for entry in as_list(gp_block.get('original')):
            if isinstance(entry, dict) and 'country' in entry:
                great_powers.append(str(entry['country']))

    subjects = []
    diplomacy = data.get('diplomacy')
    if isinstance(diplomacy, dict):
        for dependency in as_list(diplomacy.get('dependency')):
            if isinstance(dependency, dict) and 'first' in dependency and 'second' in dependency:
                subjects.append((str(dependency['first']), str(dependency['second'])))

    ledgers = {
        'income': load_ledger(data.get('income_statistics')),
        'inflation': load_ledger(data.get('inflation_statistics')),
        'score': load_ledger(data.get('score_statistics')),
        'nation_size': load_ledger(data.get('nation_size_statistics')),
    }

    start_date = data.get('start_date')
    save = SaveGame(
        date=Eu4Date.parse(data['date']) if 'date' in data else EU4_START_DATE,
        start_date=Eu4Date.parse(start_date) if start_date else EU4_START_DATE,
        countries=countries,
        provinces=provinces,
        active_wars=tuple(load_war(w, active=True) for w in as_list(data.get('active_war')) if isinstance(w, dict)),
        previous_wars=tuple(load_war(w, active=False) for w in as_list(data.get('previous_war')) if isinstance(w, dict)),
        players=players,
        great_powers=tuple(great_powers),
        subjects=tuple(subjects),
        ledgers=ledgers,
    )
    logger.debug(
        "loaded save %s: %d countries, %d provinces, %d wars",
        save.date, len(countries), len(provinces), len(save.active_wars) + len(save.previous_wars),
    )
    return save
