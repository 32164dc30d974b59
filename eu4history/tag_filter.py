"""
Declarative country filters shared by the war, losses and ledger views.

Filters select countries by their current tag. Player countries and AI
countries are matched separately, then explicit includes, subjects and
excludes are applied in that order.
"""

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from .config import LEDGER_TAG_LIMIT

if TYPE_CHECKING:
    from .query import SaveQuery

logger = logging.getLogger(__name__)

PLAYER_STATES = ('all', 'alive', 'dead', 'none')
AI_STATES = ('all', 'alive', 'great', 'dead', 'none')


@dataclass(frozen=True)
class TagFilter:
    players: str = 'all'
    ai: str = 'alive'
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    include_subjects: bool = False

    def __post_init__(self):
        if self.players not in PLAYER_STATES:
            raise ValueError(f"players must be one of {PLAYER_STATES}, got {self.players!r}")
        if self.ai not in AI_STATES:
            raise ValueError(f"ai must be one of {AI_STATES}, got {self.ai!r}")

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> 'TagFilter':
        """Build a filter from a JSON style payload (camelCase keys accepted)."""
        return cls(
            players=payload.get('players', 'all'),
            ai=payload.get('ai', 'alive'),
            include=tuple(payload.get('include', ())),
            exclude=tuple(payload.get('exclude', ())),
            include_subjects=bool(payload.get('include_subjects', payload.get('includeSubjects', False))),
        )


def _state_matches(state: str, alive: bool, great: bool = False) -> bool:
    if state == 'all':
        return True
    if state == 'alive':
        return alive
    if state == 'dead':
        return not alive
    if state == 'great':
        return great
    return False


def matching_tags(query: 'SaveQuery', payload: TagFilter) -> set[str]:
    """Resolve a filter into the set of current tags it selects."""
    save = query.save
    players = query.player_countries()
    great_powers = set(save.great_powers)

    tags = set()
    for country in save.countries.values():
        tag = country.active_tag
        if tag in players or country.human:
            if _state_matches(payload.players, country.is_alive):
                tags.add(tag)
        elif _state_matches(payload.ai, country.is_alive, tag in great_powers):
            tags.add(tag)

    known = {c.active_tag for c in save.countries.values()}
    tags.update(tag for tag in payload.include if tag in known)

    if payload.include_subjects:
        tags.update(subject for overlord, subject in save.subjects if overlord in tags)

    tags.difference_update(payload.exclude)
    return tags


def filter_tags(query: 'SaveQuery', payload: TagFilter, limit: int = LEDGER_TAG_LIMIT) -> set[str]:
    """Matching tags, degraded to at most `limit` tags for chart readability.

    Over the limit the filter is narrowed to great powers when there are
    several player nations (otherwise to players only) and intersected with the
    original selection. If nothing survives, the first `limit` tags in
    sorted order are kept.
    """
    tags = matching_tags(query, payload)
    if len(tags) <= limit:
        return tags

    narrow_ai = 'great' if len(query.player_countries()) > 1 else 'none'
    narrowed = matching_tags(query, replace(payload, ai=narrow_ai))
    inter = tags & narrowed
    if inter:
        logger.debug("narrowed %d tags to %d with ai=%s", len(tags), len(inter), narrow_ai)
        return inter

    logger.debug("truncated %d tags to %d", len(tags), limit)
    return set(sorted(tags)[:limit])
