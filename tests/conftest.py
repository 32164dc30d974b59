"""Pytest configuration: a small synthetic campaign shared by the tests."""

import matplotlib

matplotlib.use('Agg')

import pytest

from eu4history.dates import Eu4Date
from eu4history.models import (ADD_ATTACKER, ADD_DEFENDER, ANNEXED, BATTLE, BUILDING, CHANGED_TAG_FROM,
                               LEADER, OWNER, REMOVE_ATTACKER, REMOVE_DEFENDER, Battle, BattleSide,
                               Country, CountryEvent, Leader, Province, ProvinceEvent, SaveGame, War,
                               WarEvent, WarParticipant)
from eu4history.query import SaveQuery

MELTED_SAVE = '''EU4txt
date=1510.1.1
start_date=1444.11.11
players_countries={
	"alice"
	"SPA"
}
great_powers={
	original={
		country="CAS"
		value=500.000
	}
}
countries={
	SPA={
		human=yes
		num_of_cities=10
		history={
			1450.1.1={
				leader={
					name="Afonso"
					type=general
					manuever=4
					fire=3
					shock=2
					siege=1
				}
			}
			1470.1.1={
				changed_tag_from=POR
			}
		}
		losses={
			members={
				100 50 0 0
			}
		}
	}
	POR={
		num_of_cities=0
	}
	CAS={
		num_of_cities=12
	}
}
provinces={
	-1={
		name="Lisboa"
		owner="SPA"
		history={
			owner="POR"
			1450.1.1={
				fort_15th=yes
			}
		}
	}
	-2={
		name="Toledo"
		owner="CAS"
		history={
			owner="CAS"
		}
	}
}
previous_war={
	name="Castilian-Portuguese War"
	history={
		1455.1.1={
			add_attacker="POR"
			add_defender="CAS"
		}
		1456.3.1={
			battle={
				name="Toledo"
				location=2
				result=yes
				attacker={
					infantry=10000
					losses=1200
					country="POR"
					commander="Afonso"
				}
				defender={
					infantry=8000
					losses=3000
					country="CAS"
				}
			}
		}
		1460.1.1={
			rem_attacker="POR"
			rem_defender="CAS"
		}
	}
	participants={
		value=20.000
		tag="POR"
		losses={
			members={
				100 50
			}
		}
	}
	participants={
		value=15.000
		tag="CAS"
	}
	original_attacker="POR"
	original_defender="CAS"
}
income_statistics={
	ledger_data={
		name="SPA"
		data={
			1470=30 1471=32
		}
	}
}
'''


def d(text: str) -> Eu4Date:
    return Eu4Date.parse(text)


AFONSO = Leader('Afonso', fire=3, shock=2, manuever=4, siege=1)
CONDOTTIERO = Leader('Condottiero', fire=2, shock=2, manuever=2, siege=0)
LATE_JUAN = Leader('Juan', fire=5, shock=5, manuever=5, siege=5)


def build_save() -> SaveGame:
    """Portugal becomes Spain in 1470, Aragon is annexed in 1480.

    Great Britain never exists and the POR entry is the shell left behind by
    the tag switch, so neither gets an identity of its own.
    """
    countries = {
        'SPA': Country(
            'SPA', 'SPA', human=True, num_of_cities=10,
            history=(
                CountryEvent(d('1450.1.1'), LEADER, leader=AFONSO),
                CountryEvent(d('1470.1.1'), CHANGED_TAG_FROM, tag='POR'),
            ),
            losses=(500, -1),
        ),
        'POR': Country('POR', 'POR'),
        'CAS': Country(
            'CAS', 'CAS', num_of_cities=12,
            history=(CountryEvent(d('1470.1.1'), LEADER, leader=LATE_JUAN),),
            mercenary_leaders=(CONDOTTIERO,),
            losses=(10,),
        ),
        'ARA': Country('ARA', 'ARA', history=(CountryEvent(d('1480.1.1'), ANNEXED),)),
        'SWE': Country('SWE', 'SWE', num_of_cities=8),
        'GBR': Country('GBR', 'GBR'),
    }

    provinces = {
        1: Province(1, 'Lisboa', initial_owner='POR', history=(
            ProvinceEvent(d('1450.1.1'), BUILDING, building='fort_15th', constructed=True),
            ProvinceEvent(d('1460.1.1'), BUILDING, building='some_flag', constructed=True),
            ProvinceEvent(d('1480.1.1'), BUILDING, building='fort_15th', constructed=False),
        )),
        2: Province(2, 'Toledo', initial_owner='CAS', history=(
            ProvinceEvent(d('1400.1.1'), BUILDING, building='marketplace', constructed=True),
            ProvinceEvent(d('1470.6.1'), BUILDING, building='fort_15th', constructed=True),
        )),
        3: Province(3, 'Zaragoza', initial_owner='ARA', history=(
            ProvinceEvent(d('1480.1.1'), OWNER, tag='CAS'),
        )),
        4: Province(4, 'Stockholm', initial_owner='SWE'),
    }

    battle_toledo = Battle(
        'Toledo', location=2, attacker_won=True,
        attacker=BattleSide('POR', infantry=10000, losses=1200, commander='Afonso'),
        defender=BattleSide('CAS', infantry=8000, losses=3000, commander='Juan'),
        winner_alliance=1.0, loser_alliance=1.0,
    )
    battle_madrid = Battle(
        'Madrid', location=2, attacker_won=False,
        attacker=BattleSide('POR', cavalry=2000, infantry=6000, losses=2500, commander='Afonso'),
        defender=BattleSide('CAS', infantry=9000, artillery=1000, losses=800, commander='Condottiero'),
    )
    castilian_war = War(
        'Castilian-Portuguese War', 'POR', 'CAS',
        events=(
            WarEvent(d('1455.1.1'), ADD_ATTACKER, 'POR'),
            WarEvent(d('1455.1.1'), ADD_DEFENDER, 'CAS'),
            WarEvent(d('1458.1.1'), ADD_DEFENDER, 'ARA'),
            WarEvent(d('1456.3.1'), BATTLE, battle=battle_toledo),
            WarEvent(d('1457.5.1'), BATTLE, battle=battle_madrid),
            WarEvent(d('1459.1.1'), REMOVE_DEFENDER, 'ARA'),
            WarEvent(d('1460.1.1'), REMOVE_ATTACKER, 'POR'),
            WarEvent(d('1460.1.1'), REMOVE_DEFENDER, 'CAS'),
        ),
        participants=(
            WarParticipant('POR', 20.0, (100, 50)),
            WarParticipant('CAS', 15.0, (200,)),
            WarParticipant('ARA', 5.0, (30,)),
        ),
    )
    ancient_war = War(
        'Ancient War', 'SWE', 'CAS',
        events=(
            WarEvent(d('1400.1.1'), ADD_ATTACKER, 'SWE'),
            WarEvent(d('1400.1.1'), ADD_DEFENDER, 'CAS'),
        ),
    )
    unnamed_war = War('', 'CAS', 'SWE', events=(WarEvent(d('1490.1.1'), ADD_ATTACKER, 'CAS'),))
    rebel_war = War('Peasant Revolt', '---', 'SWE', events=(WarEvent(d('1490.1.1'), ADD_DEFENDER, 'SWE'),))
    swedish_war = War(
        'Spanish Conquest of Sweden', 'SPA', 'SWE',
        events=(
            WarEvent(d('1490.1.1'), ADD_ATTACKER, 'SPA'),
            WarEvent(d('1490.1.1'), ADD_DEFENDER, 'SWE'),
        ),
        participants=(WarParticipant('SPA', 3.0), WarParticipant('SWE', 1.0)),
        active=True,
    )

    return SaveGame(
        date=d('1510.1.1'),
        start_date=d('1444.11.11'),
        countries=countries,
        provinces=provinces,
        active_wars=(swedish_war,),
        previous_wars=(castilian_war, ancient_war, unnamed_war, rebel_war),
        players=(('alice', 'SPA'),),
        great_powers=('CAS',),
        subjects=(('CAS', 'ARA'),),
        ledgers={
            'income': {
                'POR': {1444: 10, 1450: 12, 1469: 15, 1470: 99},
                'SPA': {1470: 30, 1471: 32},
                'SWE': {1500: 5, 1503: 8},
                'CAS': {1500: 20},
            },
            'nation_size': {
                'SPA': {1450: 10, 1451: 12},
                'CAS': {1450: 8, 1451: 15},
                'SWE': {1450: 5, 1451: 3},
            },
        },
    )


@pytest.fixture
def save() -> SaveGame:
    return build_save()


@pytest.fixture
def query(save) -> SaveQuery:
    return SaveQuery(save)


@pytest.fixture
def melted_save_path(tmp_path):
    path = tmp_path / 'campaign.eu4'
    path.write_text(MELTED_SAVE, encoding='latin-1')
    return path
