import pytest

from eu4history.query import SaveQuery
from eu4history.tag_filter import TagFilter


def test_default_filter_matches_players_and_living_ai(query) -> None:
    assert query.matching_tags(TagFilter()) == {'SPA', 'CAS', 'SWE'}


def test_player_and_ai_states(query) -> None:
    assert query.matching_tags(TagFilter(players='all', ai='none')) == {'SPA'}
    assert query.matching_tags(TagFilter(players='dead', ai='none')) == set()
    assert query.matching_tags(TagFilter(players='none', ai='great')) == {'CAS'}
    assert query.matching_tags(TagFilter(players='none', ai='dead')) == {'POR', 'ARA', 'GBR'}


def test_include_exclude_and_subjects(query) -> None:
    payload = TagFilter(players='none', ai='great', include=('SWE', 'XXX'))
    assert query.matching_tags(payload) == {'CAS', 'SWE'}

    payload = TagFilter(players='none', ai='great', include_subjects=True)
    assert query.matching_tags(payload) == {'CAS', 'ARA'}

    assert query.matching_tags(TagFilter(exclude=('SWE',))) == {'SPA', 'CAS'}


def test_invalid_states_rejected() -> None:
    with pytest.raises(ValueError):
        TagFilter(players='some')
    with pytest.raises(ValueError):
        TagFilter(ai='friendly')


def test_from_dict_accepts_camel_case() -> None:
    payload = TagFilter.from_dict({'players': 'alive', 'ai': 'none', 'includeSubjects': True, 'include': ['SWE']})
    assert payload == TagFilter(players='alive', ai='none', include=('SWE',), include_subjects=True)


def test_under_limit_is_unchanged(query) -> None:
    assert query.filter_tags(TagFilter(), limit=3) == {'SPA', 'CAS', 'SWE'}


def test_single_player_degrades_to_players(query) -> None:
    assert query.filter_tags(TagFilter(), limit=2) == {'SPA'}


def test_several_players_degrade_to_great_powers(save) -> None:
    query = SaveQuery(save, extra_players=[['SWE']])
    payload = TagFilter(players='all', ai='all')
    assert len(query.matching_tags(payload)) == 6
    assert query.filter_tags(payload, limit=3) == {'SPA', 'SWE', 'CAS'}


def test_empty_intersection_falls_back_to_sorted_prefix(query) -> None:
    payload = TagFilter(players='none', ai='all')
    assert query.filter_tags(payload, limit=2) == {'ARA', 'CAS'}


def test_tag_history_is_one_player_nation(save) -> None:
    query = SaveQuery(save, extra_players=[['POR', 'SPA']])
    assert query.player_countries() == {'SPA'}
    # POR is only the shell Spain left behind, not a second player
    assert query.matching_tags(TagFilter(players='all', ai='none')) == {'SPA'}

    payload = TagFilter(players='all', ai='all')
    assert len(query.matching_tags(payload)) == 6
    assert query.filter_tags(payload, limit=3) == {'SPA'}
