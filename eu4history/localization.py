"""
Display names for country tags and buildings.
"""

from dataclasses import dataclass

from .config import BUILDING_NAMES, COUNTRY_NAMES
from .models import SaveGame


@dataclass(frozen=True)
class LocalizedTag:
    tag: str
    name: str


class Localizer:
    """Resolves names from the save first (custom nations), then the vanilla table."""

    def __init__(self, save: SaveGame, names: dict[str, str] | None = None):
        self.names = dict(COUNTRY_NAMES)
        if names:
            self.names.update(names)
        for tag, country in save.countries.items():
            if country.name:
                self.names[tag] = country.name

    def localize_country(self, tag: str) -> str:
        return self.names.get(tag, tag)

    def localize_tag(self, tag: str) -> LocalizedTag:
        return LocalizedTag(tag=tag, name=self.localize_country(tag))

    @staticmethod
    def localize_building(building: str) -> str:
        return BUILDING_NAMES.get(building, building)
