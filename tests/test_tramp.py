import math

import numpy as np
import pytest

import config

from separator.field_decay import MagnetGeometry
from separator.tramp import (
    InvalidGeometryError, TrampGeometry, TrampExtractionInput,
    estimate_mass, effective_contact_area, orientation_factor, burden_factor,
    available_force, margin_ratio_to_confidence, evaluate_tramp_pickup,
    calculate_margin_ratio_from_gauss, calculate_margin_ratio_from_force,
    evaluate_pickup_from_magnet, calculate_required_force_factor,
)


@pytest.fixture
def bar():
    return TrampGeometry(shape='bar', length_mm=100, width_mm=20, thickness_mm=10)


def test_bar_mass(bar):
    assert estimate_mass(bar) == pytest.approx(0.157)


def test_cube_mass_uses_density_override():
    cube = TrampGeometry(shape='cube', cube_size_mm=10, density_kg_m3=1000)
    assert estimate_mass(cube) == pytest.approx(0.001)


def test_mass_is_zero_when_dimensions_missing():
    assert estimate_mass(TrampGeometry(shape='plate', length_mm=100, width_mm=20)) == 0
    assert estimate_mass(TrampGeometry(shape='cube')) == 0


def test_cube_contact_area():
    cube = TrampGeometry(shape='cube', cube_size_mm=25)
    flat = effective_contact_area(cube, 'flat')
    assert flat == pytest.approx(0.000625)
    assert effective_contact_area(cube, 'corner') == flat * 0.5
    assert effective_contact_area(cube, 'edge') == pytest.approx(flat * 0.75)
    assert effective_contact_area(cube, 'unknown') == pytest.approx(flat * 0.6)


def test_elongated_contact_area_ordering(bar):
    flat = effective_contact_area(bar, 'flat')
    edge = effective_contact_area(bar, 'edge')
    unknown = effective_contact_area(bar, 'unknown')
    corner = effective_contact_area(bar, 'corner')
    assert flat == pytest.approx(0.1 * 0.02)
    assert edge == pytest.approx(0.1 * 0.01)
    assert unknown == pytest.approx(edge * 0.8)
    assert corner == pytest.approx(edge * 0.6)
    assert flat > edge > unknown > corner


def test_contact_area_zero_without_length():
    assert effective_contact_area(TrampGeometry(shape='bar', width_mm=20, thickness_mm=10), 'flat') == 0


def test_factors():
    assert [orientation_factor(o) for o in ('flat', 'edge', 'corner', 'unknown')] == [1.0, 4.0, 6.0, 5.0]
    assert [burden_factor(b) for b in ('none', 'light', 'moderate', 'heavy', 'severe')] == [1.0, 1.5, 2.5, 4.0, 6.0]
    assert burden_factor('compacted') == 3.0


def test_available_force_at_saturation():
    expected = 1.8 ** 2 * 0.001 / (2 * 4 * math.pi * 1e-7)
    assert available_force(1.8, 0.001) == pytest.approx(expected, rel=1e-3)
    assert available_force(1.8, 0.001) == pytest.approx(1289.2, rel=1e-3)


@pytest.mark.parametrize('ratio, expected', [
    (-1.0, 0),
    (0.0, 0),
    (0.2, 10),
    (0.5, 25),
    (0.8, 40),
    (0.9, 45),
    (1.0, 50),
    (1.5, 75),
    (2.0, 90),
    (2.5, 94),
    (3.0, 99),
    (50.0, 99),
    (math.inf, 99),
])
def test_confidence_breakpoints(ratio, expected):
    assert margin_ratio_to_confidence(ratio) == expected


def test_confidence_is_monotonic_and_bounded():
    values = [margin_ratio_to_confidence(r) for r in np.linspace(-0.5, 4.0, 901)]
    assert all(b >= a for a, b in zip(values, values[1:]))
    assert min(values) == 0
    assert max(values) == 99


def test_confidence_continuous_at_segment_ends():
    assert margin_ratio_to_confidence(0.9999) == 50
    assert margin_ratio_to_confidence(2.9999) == 98


def test_bar_from_gauss_regression(bar):
    result = calculate_margin_ratio_from_gauss(2410, 150, bar, orientation='flat', burden='moderate')
    assert result.mass_kg == pytest.approx(0.157)
    assert result.weight_N == pytest.approx(1.54, abs=0.01)
    assert result.combined_factor == pytest.approx(7.5)
    assert result.available_mag_force_N == pytest.approx(8.235, rel=1e-3)
    assert result.required_force_N == pytest.approx(11.551, rel=1e-3)
    assert result.margin_ratio == pytest.approx(0.7129, rel=1e-3)
    assert result.confidence_percent == 36
    assert result.is_likely_pickup is False
    assert result.notes[-1].startswith('Result: NOT LIKELY')


def test_bar_from_gauss_is_deterministic(bar):
    first = calculate_margin_ratio_from_gauss(2410, 150, bar, orientation='flat', burden='moderate')
    second = calculate_margin_ratio_from_gauss(2410, 150, bar, orientation='flat', burden='moderate')
    assert first == second


def test_bar_from_force(bar):
    result = calculate_margin_ratio_from_force(1000, 150, bar, orientation='flat', burden='moderate')
    assert result.available_mag_force_N == pytest.approx(1000 * math.exp(-0.0115 * 150))
    assert result.is_likely_pickup is True
    assert result.confidence_percent == 99
    assert len(result.notes) == 4


def test_gauss_path_rejects_zero_field(bar):
    with pytest.raises(InvalidGeometryError):
        calculate_margin_ratio_from_gauss(0, 150, bar)


def test_force_path_rejects_zero_force(bar):
    with pytest.raises(InvalidGeometryError):
        calculate_margin_ratio_from_force(0, 150, bar)


def test_invalid_geometry_raises():
    flat_nothing = TrampGeometry(shape='plate', length_mm=0, width_mm=10, thickness_mm=2)
    with pytest.raises(InvalidGeometryError, match='Effective contact area'):
        evaluate_tramp_pickup(flat_nothing, 'flat', 'none', 0.5)


def test_massless_tramp_is_invalid():
    plate = TrampGeometry(shape='plate', length_mm=100, width_mm=20)
    assert effective_contact_area(plate, 'flat') > 0
    with pytest.raises(InvalidGeometryError, match='Estimated mass is zero'):
        calculate_margin_ratio_from_force(100, 50, plate, orientation='flat')
    with pytest.raises(InvalidGeometryError, match='Estimated mass is zero'):
        calculate_margin_ratio_from_gauss(2410, 50, plate, orientation='flat')


def test_non_positive_safety_factor_rejected(bar):
    with pytest.raises(ValueError):
        calculate_margin_ratio_from_force(1000, 150, bar, safety_factor=0)


def test_default_safety_factor_comes_from_config(bar):
    result = calculate_margin_ratio_from_force(1000, 150, bar)
    assert result.base_safety_factor == config.DEFAULT_SAFETY_FACTOR


def test_worse_orientation_lowers_confidence(bar):
    flat = calculate_margin_ratio_from_force(200, 150, bar, orientation='flat', burden='light')
    corner = calculate_margin_ratio_from_force(200, 150, bar, orientation='corner', burden='light')
    assert corner.margin_ratio < flat.margin_ratio
    assert corner.confidence_percent <= flat.confidence_percent


def test_pickup_from_magnet_geometry(bar):
    result = evaluate_pickup_from_magnet(MagnetGeometry(70, 30), 150, bar, orientation='flat')
    assert result.magnetic_field_values is not None
    assert result.available_mag_force_N == pytest.approx(result.magnetic_field_values.force_factor_at_gap)


def test_geometry_from_dict():
    geometry = TrampGeometry.from_dict({'shape': 'cube', 'cubeSize_mm': 25})
    assert geometry.cube_size_mm == 25
    with pytest.raises(InvalidGeometryError):
        TrampGeometry.from_dict({'shape': 'sphere'})


def test_required_force_factor_generic_cube():
    result = calculate_required_force_factor(TrampExtractionInput(width_mm=25, length_mm=25, height_mm=25))
    volume_cm3 = 25 * 25 * 25 / 1000
    moment = volume_cm3 * 7.85 * math.sqrt(volume_cm3)
    ease = 0.9 * 0.90 * 1.0 * (1 - 1.5 / 8) * 1.0
    assert result.effective_type == 'generic'
    assert result.moment_factor == pytest.approx(moment)
    assert result.difficulty_multiplier == pytest.approx(1 / ease)
    assert result.required_force_factor == pytest.approx(moment / ease)


def test_required_force_factor_part_detection():
    nut = calculate_required_force_factor(TrampExtractionInput(20, 20, 10, description='M12 Nut'))
    assert nut.effective_type == 'nut'
    assert nut.stability_factor == 1.8
    plate = calculate_required_force_factor(TrampExtractionInput(100, 100, 6))
    assert plate.effective_type == 'plate'
    explicit = calculate_required_force_factor(TrampExtractionInput(100, 100, 6, description='nut', part_type='bolt'))
    assert explicit.effective_type == 'bolt'


def test_required_force_factor_grows_with_burden():
    light = calculate_required_force_factor(TrampExtractionInput(25, 25, 25, burden_mm=0))
    heavy = calculate_required_force_factor(TrampExtractionInput(25, 25, 25, burden_mm=300))
    assert heavy.required_force_factor > light.required_force_factor
