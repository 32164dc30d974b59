"""
Shared constants for the EU4 save history queries.
"""

from pathlib import Path

from .dates import Eu4Date

# Tag the game writes for a war side that no longer exists
NO_ENTITY_TAG = '---'

# Date every vanilla campaign starts on, used when a save omits start_date
EU4_START_DATE = Eu4Date(1444, 11, 11)

# Max number of countries drawn in a single ledger chart
LEDGER_TAG_LIMIT = 30

# Countries kept per year in the nation size chart
NATION_SIZE_TOP = 25

UNKNOWN_COMMANDER_STATS = '(? / ? / ? / ?)'

# Losses are stored as thousands in a signed 32 bit integer
LOSSES_MAX = (2**31 - 1) // 1000

UNIT_KINDS = ('infantry', 'cavalry', 'artillery', 'heavy_ship', 'light_ship', 'galley', 'transport')

LOSSES_CATEGORIES = tuple(
    f'{unit}_{kind}' for unit in UNIT_KINDS for kind in ('battle', 'attrition', 'captured')
)

STATISTICS = ('income', 'inflation', 'score', 'nation_size')

# Building ID to display name mapping
BUILDING_NAMES = {
    'fort_15th': 'Castle', 'fort_16th': 'Bastion', 'fort_17th': 'Star Fort', 'fort_18th': 'Fortress',
    'marketplace': 'Marketplace', 'trade_depot': 'Trade Depot', 'stock_exchange': 'Stock Exchange',
    'workshop': 'Workshop', 'counting_house': 'Counting House',
    'temple': 'Temple', 'cathedral': 'Cathedral',
    'barracks': 'Barracks', 'training_fields': 'Training Fields',
    'regimental_camp': 'Regimental Camp', 'conscription_center': 'Conscription Center',
    'shipyard': 'Shipyard', 'grand_shipyard': 'Grand Shipyard',
    'dock': 'Dock', 'drydock': 'Drydock',
    'courthouse': 'Courthouse', 'town_hall': 'Town Hall',
    'university': 'University', 'state_house': 'State House',
    'coastal_defence': 'Coastal Defense', 'naval_battery': 'Naval Battery',
    'ramparts': 'Ramparts', 'soldier_households': 'Soldier Households',
    'impressment_offices': 'Impressment Offices',
    'textile': 'Textile Manufactory', 'weapons': 'Weapon Manufactory',
    'plantations': 'Plantations', 'tradecompany': 'Trade Company',
    'wharf': 'Wharf', 'farm_estate': 'Farm Estate', 'mills': 'Mills',
    'furnace': 'Furnace', 'native_earthwork': 'Earthwork',
    'native_palisade': 'Palisade', 'native_fortified_house': 'Fortified House',
    'native_three_sisters_field': 'Three Sisters Field', 'native_longhouse': 'Longhouse',
    'native_sweat_lodge': 'Sweat Lodge', 'native_great_trail': 'Great Trail',
    'native_ceremonial_fire_pit': 'Ceremonial Fire Pit', 'native_irrigation': 'Irrigation',
}

# Province flags that share the history stream with buildings are not in this set
BUILDING_IDS = frozenset(BUILDING_NAMES)

# Vanilla names for common tags; saves only carry names for custom nations
COUNTRY_NAMES = {
    'SWE': 'Sweden', 'DAN': 'Denmark', 'NOR': 'Norway', 'SCA': 'Scandinavia',
    'ENG': 'England', 'GBR': 'Great Britain', 'SCO': 'Scotland', 'IRE': 'Ireland',
    'FRA': 'France', 'BUR': 'Burgundy', 'CAS': 'Castile', 'ARA': 'Aragon',
    'POR': 'Portugal', 'SPA': 'Spain', 'HAB': 'Austria', 'BOH': 'Bohemia',
    'HUN': 'Hungary', 'POL': 'Poland', 'LIT': 'Lithuania', 'PLC': 'Commonwealth',
    'MOS': 'Muscovy', 'RUS': 'Russia', 'NOV': 'Novgorod', 'TUR': 'Ottomans',
    'BYZ': 'Byzantium', 'VEN': 'Venice', 'MLO': 'Milan', 'NAP': 'Naples',
    'PAP': 'The Papal State', 'ITA': 'Italy', 'BRA': 'Brandenburg', 'PRU': 'Prussia',
    'TEU': 'Teutonic Order', 'HOL': 'Holland', 'NED': 'Netherlands', 'MNG': 'Ming',
    'QNG': 'Qing', 'JAP': 'Japan', 'TIM': 'Timurids', 'MUG': 'Mughals',
    'MAM': 'Mamluks', 'PER': 'Persia', 'KOR': 'Korea', 'GER': 'Germany',
}


def load_human_countries(path: Path) -> list[list[str]]:
    """Load human-controlled countries from a HUMANS.txt style file.

    Each line can contain multiple tags (space-separated) representing
    the same player's tag history (e.g., "POR SPA" for Portugal -> Spain).
    Returns a list of tag-lists, where each inner list is one player's tags.
    """
    players = []
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    tags = line.split()
                    if tags:
                        players.append(tags)
    return players
