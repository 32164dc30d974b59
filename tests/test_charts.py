import numpy as np

from eu4history import charts
from eu4history.ledger import LocalizedLedger
from eu4history.tag_filter import TagFilter


def test_ledger_series_breaks_on_gaps(query) -> None:
    series = charts.ledger_series(query.annual_ledger('income', TagFilter()))
    years, values = series['SWE']
    assert list(years) == [1500, 1501, 1502, 1503]
    assert values[0] == 5
    assert np.isnan(values[1])
    assert np.isnan(values[2])


def test_ledger_chart(query, tmp_path, capsys) -> None:
    path = charts.create_ledger_chart(query.annual_ledger('income', TagFilter()), 'income', tmp_path)
    assert path == tmp_path / 'ledger_income.png'
    assert path.exists()

    # stdout is reserved for JSON output
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'Saved: ledger_income.png' in captured.err

    assert charts.create_ledger_chart(LocalizedLedger([], []), 'score', tmp_path) is None


def test_building_chart(query, tmp_path) -> None:
    path = charts.create_building_chart(query.building_history(), tmp_path)
    assert path.exists()
    assert charts.create_building_chart([], tmp_path) is None


def test_war_losses_treemap(query, tmp_path) -> None:
    info = query.get_war('Castilian-Portuguese War')
    path = charts.create_war_losses_treemap(info, 'Castilian-Portuguese War', tmp_path)
    assert path.name == 'war_losses_castilian_portuguese_war.png'
    assert path.exists()

    # No participant lost anything
    info = query.get_war('Spanish Conquest of Sweden')
    assert charts.create_war_losses_treemap(info, 'Spanish Conquest of Sweden', tmp_path) is None
