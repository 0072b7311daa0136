import math

import pytest

from separator.catalog import (
    OCWUnit, find_unit, recommend_units, gauss_table, magnet_models,
    filter_by_belt_width, severity, tramp_required_force, classify_margin, compare_model,
)
from separator.tramp import TrampGeometry


@pytest.fixture
def bar_item():
    return {'geometry': TrampGeometry(shape='bar', length_mm=100, width_mm=20, thickness_mm=10), 'orientation': 'flat'}


def test_unit_from_row():
    unit = OCWUnit.from_row({'Prefix': 70, 'Suffix': 30, 'surface_gauss': 2520, 'force_factor': 1010,
                             'watts': 6100, 'width': 1200})
    assert unit.model_name == '70 OCW 30'
    assert unit.to_dict()['model'] == '70 OCW 30'


def test_find_unit(units):
    assert find_unit(units, 70, 30).force_factor == 1010
    assert find_unit(units, 1, 2) is None


def test_recommend_units(units):
    matches = recommend_units(units, belt_width=1200, core_belt_ratio=0.3)
    assert [(u.prefix, u.suffix) for u in matches] == [(70, 45), (80, 50)]


def test_recommend_units_with_field_floor(units):
    matches = recommend_units(units, belt_width=1200, core_belt_ratio=0.25, min_gauss=2500)
    assert [(u.prefix, u.suffix) for u in matches] == [(70, 30), (80, 50)]


def test_gauss_table(units):
    unit = find_unit(units, 70, 30)
    rows = gauss_table(unit)
    assert len(rows) == 33
    assert rows[0]['gap'] == 0
    assert rows[0]['gauss_A20'] == 2520
    assert rows[0]['ff_A20'] == 1010
    assert rows[-1]['gap'] == 800
    assert rows[1]['gauss_A30'] == round(2520 * math.exp(-0.00575 * 25) * 0.95484)
    assert rows[1]['ff_A45'] < rows[1]['ff_A20']


def test_magnet_models(units):
    models = {m['name']: m for m in magnet_models(units)}
    assert models['70 OCW 30']['k'] == pytest.approx(0.005)
    assert all(0.003 <= m['k'] <= 0.008 for m in models.values())


def test_filter_by_belt_width(units):
    kept = filter_by_belt_width(units, 1000)
    assert {u.width for u in kept} == {1000, 1100, 1200, 1250}


def test_severity_reference_point():
    assert severity(2.0, 200, 100) == pytest.approx(1.0)
    assert severity(4.0, 200, 100) > 1.0


def test_classify_margin():
    assert classify_margin(10, 20)['status'] == 'excellent'
    assert classify_margin(10, 16)['status'] == 'adequate'
    assert classify_margin(10, 11)['status'] == 'marginal'
    assert classify_margin(10, 5)['status'] == 'insufficient'


def test_compare_model_crossover(units, bar_item):
    unit = find_unit(units, 70, 30)
    points = compare_model(unit, [bar_item], burden='moderate')
    required = tramp_required_force(bar_item['geometry'], 'flat', 'moderate')
    assert required == pytest.approx(11.551, rel=1e-3)
    by_gap = {p['gap']: p for p in points}
    assert by_gap[375.0]['sufficient']
    assert not by_gap[400.0]['sufficient']
    assert by_gap[0.0]['confidence_percent'] == 99
    assert by_gap[800.0]['confidence_percent'] < 50


def test_compare_model_hot_ambient_reduces_force(units, bar_item):
    unit = find_unit(units, 70, 30)
    cold = compare_model(unit, [bar_item], ambient=20)
    hot = compare_model(unit, [bar_item], ambient=45)
    assert hot[4]['model_force'] < cold[4]['model_force']
    with pytest.raises(ValueError):
        compare_model(unit, [bar_item], ambient=25)


def test_compare_model_without_tramp(units):
    points = compare_model(find_unit(units, 70, 30), [])
    assert points[0]['margin'] is None
    assert points[0]['confidence_percent'] is None


def test_magnet_models_keep_missing_surface_field():
    unit = OCWUnit(prefix=60, suffix=35, surface_gauss=0.0, force_factor=0.0, watts=0.0, width=1100)
    model = magnet_models([unit])[0]
    assert model['G0'] == 0.0
    assert model['name'] == '60 OCW 35'
