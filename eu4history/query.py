"""
Entry point for all derived views of a loaded save.

SaveQuery builds the identity index and tag resolver once; every view method
is a pure function of the immutable save and returns freshly built records.
"""

from pathlib import Path

from . import buildings, ledger, players, tag_filter
from . import wars as war_history
from .config import LEDGER_TAG_LIMIT, NATION_SIZE_TOP
from .localization import Localizer
from .models import SaveGame, load_save
from .nation_events import TagResolver, build_nation_events
from .parser import parse_save_file
from .tag_filter import TagFilter


class SaveQuery:
    def __init__(self, save: SaveGame, names: dict[str, str] | None = None,
                 extra_players: list[list[str]] | None = None):
        self.save = save
        self.localizer = Localizer(save, names)
        self.nation_events = build_nation_events(save)
        self.resolver = TagResolver(self.nation_events)
        # Player tag histories from HUMANS.txt, on top of the save's own players
        self.extra_players = [list(tags) for tags in extra_players or []]

    @classmethod
    def from_file(cls, filepath: Path, **kwargs) -> 'SaveQuery':
        return cls(load_save(parse_save_file(filepath)), **kwargs)

    def localize_country(self, tag: str) -> str:
        return self.localizer.localize_country(tag)

    def player_countries(self) -> set[str]:
        """Current tags of player nations, one per nation however many tags it held."""
        return {history.latest for history in self.player_histories()}

    def matching_tags(self, payload: TagFilter) -> set[str]:
        return tag_filter.matching_tags(self, payload)

    def filter_tags(self, payload: TagFilter, limit: int = LEDGER_TAG_LIMIT) -> set[str]:
        return tag_filter.filter_tags(self, payload, limit)

    def wars(self, payload: TagFilter) -> list[war_history.WarSummary]:
        return war_history.wars(self, self.matching_tags(payload))

    def get_war(self, name: str) -> war_history.WarInfo:
        return war_history.get_war(self, name)

    def country_casualties(self, tag: str) -> list[war_history.CountryWarCasualties]:
        return war_history.country_casualties(self, tag)

    def countries_war_losses(self, payload: TagFilter) -> list[war_history.CountryLosses]:
        return war_history.countries_war_losses(self, self.matching_tags(payload))

    def building_history(self, building_ids=None) -> list[buildings.BuildingCount]:
        return buildings.building_history(self, building_ids)

    def province_history(self, province_id: int) -> list[buildings.ProvinceHistoryEvent] | None:
        return buildings.province_history(self, province_id)

    def annual_ledger(self, statistic: str, payload: TagFilter,
                      limit: int = LEDGER_TAG_LIMIT) -> ledger.LocalizedLedger:
        return ledger.annual_ledger(self, statistic, payload, limit)

    def nation_size_statistics(self, top: int = NATION_SIZE_TOP) -> list[ledger.NationSizeHistory]:
        return ledger.nation_size_statistics(self, top)

    def player_histories(self) -> list[players.PlayerHistory]:
        return players.player_histories(self)
