from dataclasses import replace

from conftest import d
from eu4history.buildings import building_deltas
from eu4history.config import BUILDING_IDS
from eu4history.models import BUILDING, Province, ProvinceEvent
from eu4history.query import SaveQuery

YEARS = 1510 - 1444 + 1


def counts(history, building):
    return {h.year: h.count for h in history if h.building == building}


def test_deltas_clamp_to_campaign_and_ignore_flags(query) -> None:
    assert building_deltas(query) == {
        ('fort_15th', 1450): 1,
        ('fort_15th', 1470): 1,
        ('fort_15th', 1480): -1,
        ('marketplace', 1444): 1,
    }


def test_history_is_dense(query) -> None:
    history = query.building_history()
    assert len(history) == 2 * YEARS

    forts = counts(history, 'fort_15th')
    assert sorted(forts) == list(range(1444, 1511))
    assert forts[1449] == 0
    assert forts[1450] == 1
    assert forts[1469] == 1
    assert forts[1470] == 2
    assert forts[1479] == 2
    assert forts[1480] == 1
    assert forts[1510] == 1

    assert set(counts(history, 'marketplace').values()) == {1}
    assert all(h.building != 'some_flag' for h in history)


def test_history_order(query) -> None:
    history = query.building_history()
    assert [(h.building, h.year) for h in history[:4]] == [
        ('marketplace', 1444), ('fort_15th', 1444),
        ('marketplace', 1445), ('fort_15th', 1445),
    ]
    assert history[1].name == 'Castle'


def test_building_selection(query) -> None:
    history = query.building_history(['marketplace'])
    assert {h.building for h in history} == {'marketplace'}
    assert query.building_history(['university']) == []


def test_province_history(query) -> None:
    events = query.province_history(1)
    assert [(e.date, e.kind, e.id, e.name) for e in events] == [
        ('1450-01-01', 'Constructed', 'fort_15th', 'Castle'),
        ('1480-01-01', 'Demolished', 'fort_15th', 'Castle'),
    ]

    (owner,) = query.province_history(3)
    assert (owner.kind, owner.id, owner.name) == ('Owner', 'CAS', 'Castile')

    assert query.province_history(999) is None


def test_built_then_demolished(save) -> None:
    porto = Province(9, 'Porto', initial_owner='POR', history=(
        ProvinceEvent(d('1450.3.1'), BUILDING, building='fort_15th', constructed=True),
        ProvinceEvent(d('1470.9.1'), BUILDING, building='fort_15th', constructed=False),
    ))
    query = SaveQuery(replace(save, provinces={9: porto}))

    forts = counts(query.building_history(), 'fort_15th')
    assert forts[1449] == 0
    assert all(forts[year] == 1 for year in range(1450, 1470))
    assert forts[1470] == 0
    assert forts[1510] == 0


def test_deltas_add_up_to_net_change(query, save) -> None:
    net = {}
    for province in save.provinces.values():
        for event in province.history:
            if event.kind == BUILDING and event.building in BUILDING_IDS:
                net[event.building] = net.get(event.building, 0) + (1 if event.constructed else -1)

    deltas = building_deltas(query)
    for building, change in net.items():
        assert sum(v for (b, _), v in deltas.items() if b == building) == change

    final = {h.building: h.count for h in query.building_history() if h.year == 1510}
    assert final == net
