import math

import pytest

from separator.calculations import (
    estimate_ampere_turns, field_at_gap, penetration_depth, calculate_magnetic_field,
    capture_probability, derating_factors, size_band_multipliers,
    calculate_tramp_metal_removal, calculate_thermal_performance,
    perform_complete_calculation, perform_enhanced_calculation,
)
from separator.constants import MU0
from separator.inputs import CalculatorInputs
from separator.recommender import score_models, recommend_separator_model


def test_inputs_from_camel_case_dict():
    inputs = CalculatorInputs.from_dict({
        'geometric': {'beltWidth': 1400, 'beltSpeed': 3.0},
        'magnetic': {'magnetGap': 200, 'coreBeltRatio': 0.5, 'powerSourceType': 'permanent'},
        'material': {'waterContent': 4, 'trampMetalSize': {'min': 10, 'max': 30}},
        'environmental': {'operatingTemperature': 35},
    })
    assert inputs.geometric.belt_width == 1400
    assert inputs.geometric.feed_rate == 100.0
    assert inputs.magnetic.magnet_gap == 200
    assert inputs.magnetic.power_source_type == 'permanent'
    assert inputs.material.average_tramp_size == 20
    assert inputs.environmental.operating_temperature == 35


def test_inputs_from_empty_dict_use_defaults():
    assert CalculatorInputs.from_dict({}) == CalculatorInputs()


def test_field_at_default_gap(default_inputs):
    assert estimate_ampere_turns(default_inputs) == pytest.approx(21600)
    expected = MU0 * 21600 / 0.162
    assert field_at_gap(default_inputs) == pytest.approx(expected)
    assert field_at_gap(default_inputs) == pytest.approx(0.16755, rel=1e-3)


def test_field_saturates():
    inputs = CalculatorInputs()
    inputs.geometric.belt_width = 2400
    inputs.magnetic.core_belt_ratio = 0.9
    inputs.magnetic.magnet_gap = 0
    assert field_at_gap(inputs) == 1.8


def test_field_decreases_with_gap(default_inputs):
    near = field_at_gap(default_inputs)
    default_inputs.magnetic.magnet_gap = 300
    assert field_at_gap(default_inputs) < near


def test_penetration_depth_reaches_ten_percent():
    depth = penetration_depth(150)
    assert (150 / (150 + depth)) ** 2.5 == pytest.approx(0.1)
    assert penetration_depth(300) == pytest.approx(2 * depth)


def test_magnetic_field_units(default_inputs):
    result = calculate_magnetic_field(default_inputs)
    assert result.gauss == pytest.approx(result.tesla * 1e4)


def test_capture_probability_centre():
    assert capture_probability(1.0) == pytest.approx(0.5)
    assert capture_probability(2.0) > 0.98
    assert capture_probability(math.inf) == 1.0


def test_derating_factors_clipped():
    inputs = CalculatorInputs()
    inputs.geometric.belt_speed = 20
    inputs.geometric.material_layer_thickness = 1000
    inputs.material.water_content = 150
    factors = derating_factors(inputs)
    assert all(0.0 <= v <= 1.0 for v in factors.values())
    assert factors['belt_speed'] == 0.0
    assert factors['moisture'] == 0.0


def test_size_bands():
    assert size_band_multipliers(5) == (0.90, 1.00, 1.05)
    assert size_band_multipliers(15) == (0.80, 0.95, 1.05)
    assert size_band_multipliers(27.5) == (0.70, 0.90, 1.10)


def test_default_removal_efficiency(default_inputs):
    removal = calculate_tramp_metal_removal(default_inputs)
    assert removal.overall_efficiency == pytest.approx(0.265, abs=0.005)
    assert removal.fine_particles < removal.medium_particles < removal.large_particles


def test_efficiency_clamps():
    inputs = CalculatorInputs()
    inputs.geometric.belt_width = 2400
    inputs.magnetic.core_belt_ratio = 0.9
    inputs.magnetic.magnet_gap = 100
    inputs.geometric.belt_speed = 0.5
    inputs.geometric.material_layer_thickness = 10
    inputs.geometric.trough_angle = 0
    inputs.material.water_content = 0
    removal = calculate_tramp_metal_removal(inputs)
    assert removal.overall_efficiency <= 0.99
    assert removal.fine_particles <= 0.98
    assert removal.medium_particles <= 0.99
    assert removal.large_particles == pytest.approx(0.995)


def test_thermal_performance(default_inputs):
    thermal = calculate_thermal_performance(default_inputs)
    assert thermal.total_power_loss == pytest.approx(2e-5 * 21600 ** 2)
    assert thermal.cooling_efficiency == 1.0
    assert thermal.temperature_rise == pytest.approx(thermal.total_power_loss * 0.004)


def test_thermal_cooling_floor():
    inputs = CalculatorInputs()
    inputs.environmental.altitude = 10000
    inputs.environmental.operating_temperature = 200
    thermal = calculate_thermal_performance(inputs)
    assert thermal.cooling_efficiency == pytest.approx(0.25)
    assert thermal.temperature_rise == pytest.approx(thermal.total_power_loss * 0.004 / 0.25)


def test_permanent_magnet_has_no_coil_loss():
    inputs = CalculatorInputs()
    inputs.magnetic.power_source_type = 'permanent'
    thermal = calculate_thermal_performance(inputs)
    assert thermal.total_power_loss == 0
    assert thermal.temperature_rise == 0


def test_default_recommendation(default_inputs):
    recommendation = recommend_separator_model(default_inputs)
    assert recommendation.model == 'EMAX (Air Cooled)'
    assert recommendation.score == 90
    assert [a.model for a in recommendation.alternatives] == [
        'OCW (Oil Cooled)', 'PCB (Permanent Magnet)', 'EMAX-W (Wide Belt Air Cooled)',
    ]


def test_recommendation_caps_and_keeps_table_order_on_ties():
    inputs = CalculatorInputs()
    inputs.geometric.belt_width = 2000
    inputs.geometric.feed_rate = 1500
    inputs.magnetic.magnet_gap = 300
    inputs.environmental.operating_temperature = 45
    ranked = score_models(inputs)
    assert ranked[0].model == 'OCW (Oil Cooled)'
    assert ranked[1].model == 'OCW-HD (Heavy Duty Oil Cooled)'
    assert ranked[0].score == ranked[1].score == 100
    scores = [s.score for s in ranked]
    assert scores == sorted(scores, reverse=True)


def test_complete_calculation(default_inputs):
    results = perform_complete_calculation(default_inputs)
    data = results.to_dict()
    assert set(data) == {'magnetic_field_strength', 'tramp_metal_removal', 'thermal_performance', 'recommended_model'}
    assert data['recommended_model']['model'] == 'EMAX (Air Cooled)'


def test_enhanced_calculation(default_inputs):
    results = perform_enhanced_calculation(default_inputs)
    assert results.validation.is_valid
    assert results.recommended_tools == ['comsol']
    assert results.optimization is None

    optimized = perform_enhanced_calculation(default_inputs, optimize=True, target_efficiency=0.3, max_iterations=10)
    assert optimized.optimization.success


def test_zero_gap_and_zero_depth_flow_through():
    inputs = CalculatorInputs()
    inputs.magnetic.magnet_gap = 0
    inputs.geometric.material_layer_thickness = 0
    results = perform_complete_calculation(inputs)
    assert results.magnetic_field_strength.tesla == 1.8
    assert results.tramp_metal_removal.overall_efficiency == 0.0


@pytest.mark.parametrize('gap', [-12, -20])
def test_negative_gap_flows_through(gap):
    inputs = CalculatorInputs()
    inputs.magnetic.magnet_gap = gap
    results = perform_complete_calculation(inputs)
    assert results.magnetic_field_strength.tesla <= 1.8
    assert not math.isnan(results.magnetic_field_strength.tesla)
    assert results.tramp_metal_removal.overall_efficiency == 0.0
    assert results.magnetic_field_strength.penetration_depth < 0


def test_undefined_force_ratio_gives_no_capture():
    assert capture_probability(float('nan')) == 0.0
