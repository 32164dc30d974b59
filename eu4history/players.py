"""
Player nation histories: which tags each player's nation went through.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .nation_events import NationEvents

if TYPE_CHECKING:
    from .query import SaveQuery


@dataclass
class TagTransition:
    name: str
    tag: str
    date: str


@dataclass
class PlayerHistory:
    name: str
    latest: str
    annexed: str | None
    is_human: bool
    transitions: list[TagTransition] = field(default_factory=list)
    player_names: list[str] = field(default_factory=list)


def _find_nation(query: 'SaveQuery', tag: str) -> NationEvents | None:
    nations = query.nation_events
    exact = next((n for n in nations if n.latest == tag), None)
    if exact is not None:
        return exact
    return next((n for n in nations if tag in n.tags()), None)


def player_histories(query: 'SaveQuery') -> list[PlayerHistory]:
    """One entry per nation any player controlled, in order of first mention."""
    grouped: dict[str, tuple[NationEvents, list[str]]] = {}

    entries = list(query.save.players)
    for tags in query.extra_players:
        # HUMANS.txt lists a player's tags oldest first
        entries.extend(('', tag) for tag in reversed(tags))

    for player_name, tag in entries:
        nation = _find_nation(query, tag)
        if nation is None:
            continue
        _, names = grouped.setdefault(nation.stored, (nation, []))
        if player_name and player_name not in names:
            names.append(player_name)

    result = []
    for nation, names in grouped.values():
        country = query.save.country(nation.stored)
        annexed = nation.annexed
        result.append(PlayerHistory(
            name=query.localize_country(nation.latest),
            latest=nation.latest,
            annexed=annexed.iso_8601() if annexed else None,
            is_human=country.human if country else False,
            transitions=[
                TagTransition(name=query.localize_country(tag), tag=tag, date=date.iso_8601())
                for date, tag in nation.transitions()
            ],
            player_names=names,
        ))
    return result
