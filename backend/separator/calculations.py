"""
Aggregate separator calculation.

Turns a CalculatorInputs record into field strength, tramp removal
efficiency, thermal performance and a recommended model:

- ampere-turns estimated from core width (core:belt ratio x belt width)
- field across the gap B0 = min(mu0 * NI / g_eff, B_SAT)
- removal efficiency from a logistic capture probability, derated for
  conveyor and site conditions and split into size bands
- coil power loss and temperature rise with altitude/ambient derating
"""

import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional

import numpy as np
from scipy.special import expit

from config import DEFAULT_TARGET_EFFICIENCY

from .constants import (
    MU0, GRAVITY, STEEL_DENSITY,
    AMPERE_TURNS_PER_MM_CORE, LEAKAGE_GAP_MM, B_SAT,
    FIELD_DECAY_EXPONENT, PENETRATION_FRACTION,
    LOGISTIC_STEEPNESS, LOGISTIC_CENTER, BURDEN_DRAG_COEFF,
    SPEED_DERATE, SPEED_REFERENCE, DEPTH_DERATE, DEPTH_REFERENCE,
    TROUGH_DERATE, TEMPERATURE_DERATE, REFERENCE_TEMPERATURE,
    ALTITUDE_DERATE, MOISTURE_DERATE, SIZE_BANDS,
    MAX_OVERALL_EFFICIENCY, MAX_FINE_EFFICIENCY, MAX_MEDIUM_EFFICIENCY, MAX_LARGE_EFFICIENCY,
    POWER_LOSS_COEFF, THERMAL_RESISTANCE, ALTITUDE_COOLING_LOSS,
    TEMPERATURE_COOLING_LOSS, MIN_COOLING_FACTOR,
)
from .inputs import CalculatorInputs
from .recommender import RecommendedModel, recommend_separator_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MagneticFieldStrength:
    tesla: float
    gauss: float
    penetration_depth: float  # mm


@dataclass(frozen=True)
class TrampMetalRemoval:
    overall_efficiency: float
    fine_particles: float
    medium_particles: float
    large_particles: float


@dataclass(frozen=True)
class ThermalPerformance:
    total_power_loss: float  # W
    temperature_rise: float  # °C
    cooling_efficiency: float


@dataclass(frozen=True)
class CalculationResults:
    magnetic_field_strength: MagneticFieldStrength
    tramp_metal_removal: TrampMetalRemoval
    thermal_performance: ThermalPerformance
    recommended_model: RecommendedModel

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EnhancedCalculationResults(CalculationResults):
    validation: Any = None
    recommended_tools: List[str] = field(default_factory=list)
    optimization: Optional[Any] = None


def estimate_ampere_turns(inputs: CalculatorInputs) -> float:
    core_width_mm = inputs.magnetic.core_belt_ratio * inputs.geometric.belt_width
    return AMPERE_TURNS_PER_MM_CORE * core_width_mm


def field_at_gap(inputs: CalculatorInputs) -> float:
    """B0 [T] across the configured gap, capped at saturation."""
    ni = estimate_ampere_turns(inputs)
    g_eff_m = (inputs.magnetic.magnet_gap + LEAKAGE_GAP_MM) / 1000.0
    # no guard on the gap: a zero effective gap saturates, a negative one gives a negative field
    with np.errstate(divide='ignore', invalid='ignore'):
        b0 = np.divide(MU0 * ni, g_eff_m)
    return float(np.minimum(b0, B_SAT))


def penetration_depth(gap_mm: float, exponent: float = FIELD_DECAY_EXPONENT,
                      fraction: float = PENETRATION_FRACTION) -> float:
    # (g / (g + d))^n = fraction  ->  d = g * (fraction^(-1/n) - 1)
    return gap_mm * (math.pow(fraction, -1.0 / exponent) - 1.0)


def calculate_magnetic_field(inputs: CalculatorInputs) -> MagneticFieldStrength:
    b0 = field_at_gap(inputs)
    return MagneticFieldStrength(
        tesla=b0,
        gauss=b0 * 1e4,
        penetration_depth=penetration_depth(inputs.magnetic.magnet_gap),
    )


def capture_force_ratio(inputs: CalculatorInputs, b0: Optional[float] = None) -> float:
    """Magnetic force on an average tramp at mid-burden over its resisting force."""
    if b0 is None:
        b0 = field_at_gap(inputs)
    gap = inputs.magnetic.magnet_gap
    depth = inputs.geometric.material_layer_thickness
    # zero or negative gaps give nan here rather than raising
    with np.errstate(divide='ignore', invalid='ignore'):
        b_tramp = float(b0 * np.power(np.divide(gap, gap + 0.5 * depth), FIELD_DECAY_EXPONENT))

    size_m = inputs.material.average_tramp_size / 1000.0
    magnetic = b_tramp ** 2 * size_m ** 2 / (2 * MU0)
    weight = STEEL_DENSITY * size_m ** 3 * GRAVITY
    drag = 1.0 + BURDEN_DRAG_COEFF * inputs.material.bulk_density * depth / 100.0
    resisting = weight * drag
    if resisting <= 0:
        return math.inf
    return magnetic / resisting


def capture_probability(force_ratio: float) -> float:
    """Logistic capture probability; 0.5 at a force ratio of 1, 0 when the ratio is undefined."""
    if math.isnan(force_ratio):
        return 0.0
    if math.isinf(force_ratio):
        return 1.0
    return float(expit(LOGISTIC_STEEPNESS * (force_ratio - LOGISTIC_CENTER)))


def derating_factors(inputs: CalculatorInputs) -> Dict[str, float]:
    geo = inputs.geometric
    env = inputs.environmental
    factors = {
        'belt_speed': 1 - SPEED_DERATE * max(0.0, geo.belt_speed - SPEED_REFERENCE),
        'feed_depth': 1 - DEPTH_DERATE * max(0.0, geo.material_layer_thickness - DEPTH_REFERENCE),
        'trough_angle': 1 - TROUGH_DERATE * geo.trough_angle,
        'temperature': 1 - TEMPERATURE_DERATE * max(0.0, env.operating_temperature - REFERENCE_TEMPERATURE),
        'altitude': 1 - ALTITUDE_DERATE * env.altitude / 1000.0,
        'moisture': 1 - MOISTURE_DERATE * inputs.material.water_content,
    }
    return {name: float(np.clip(value, 0.0, 1.0)) for name, value in factors.items()}


def size_band_multipliers(average_size_mm: float):
    for upper, multipliers in SIZE_BANDS:
        if average_size_mm < upper:
            return multipliers
    return SIZE_BANDS[-1][1]


def calculate_tramp_metal_removal(inputs: CalculatorInputs, b0: Optional[float] = None) -> TrampMetalRemoval:
    probability = capture_probability(capture_force_ratio(inputs, b0))
    derate = float(np.prod(list(derating_factors(inputs).values())))
    base = probability * derate

    fine, medium, large = size_band_multipliers(inputs.material.average_tramp_size)
    return TrampMetalRemoval(
        overall_efficiency=float(np.clip(base, 0.0, MAX_OVERALL_EFFICIENCY)),
        fine_particles=float(np.clip(base * fine, 0.0, MAX_FINE_EFFICIENCY)),
        medium_particles=float(np.clip(base * medium, 0.0, MAX_MEDIUM_EFFICIENCY)),
        large_particles=float(np.clip(base * large, 0.0, MAX_LARGE_EFFICIENCY)),
    )


def cooling_factor(inputs: CalculatorInputs) -> float:
    env = inputs.environmental
    altitude = max(MIN_COOLING_FACTOR, 1 - ALTITUDE_COOLING_LOSS * env.altitude / 1000.0)
    excess = max(0.0, env.operating_temperature - REFERENCE_TEMPERATURE)
    ambient = max(MIN_COOLING_FACTOR, 1 - TEMPERATURE_COOLING_LOSS * excess / 10.0)
    return altitude * ambient


def calculate_thermal_performance(inputs: CalculatorInputs) -> ThermalPerformance:
    source = inputs.magnetic.power_source_type
    if source == 'permanent':
        power_loss = 0.0
    else:
        power_loss = POWER_LOSS_COEFF * estimate_ampere_turns(inputs) ** 2

    cooling = cooling_factor(inputs)
    base_resistance = THERMAL_RESISTANCE.get(source, THERMAL_RESISTANCE['electromagnetic-oil'])
    resistance = base_resistance / cooling
    return ThermalPerformance(
        total_power_loss=power_loss,
        temperature_rise=power_loss * resistance,
        cooling_efficiency=cooling,
    )


def calculate_efficiency(inputs: CalculatorInputs) -> float:
    """Overall removal efficiency only; the optimizer's objective."""
    return calculate_tramp_metal_removal(inputs).overall_efficiency


def perform_complete_calculation(inputs: CalculatorInputs) -> CalculationResults:
    field_strength = calculate_magnetic_field(inputs)
    results = CalculationResults(
        magnetic_field_strength=field_strength,
        tramp_metal_removal=calculate_tramp_metal_removal(inputs, field_strength.tesla),
        thermal_performance=calculate_thermal_performance(inputs),
        recommended_model=recommend_separator_model(inputs),
    )
    logger.debug("B0=%.4f T, efficiency=%.3f, model=%s",
                 field_strength.tesla, results.tramp_metal_removal.overall_efficiency,
                 results.recommended_model.model)
    return results


def perform_enhanced_calculation(inputs: CalculatorInputs, optimize: bool = False,
                                 target_efficiency: float = DEFAULT_TARGET_EFFICIENCY,
                                 max_iterations: Optional[int] = None) -> EnhancedCalculationResults:
    from .validation import validate_calculation_results, get_recommended_validation_tools
    from .optimizer import optimize_for_target_efficiency

    base = perform_complete_calculation(inputs)
    optimization = None
    if optimize:
        kwargs = {} if max_iterations is None else {'max_iterations': max_iterations}
        optimization = optimize_for_target_efficiency(inputs, target_efficiency, **kwargs)

    return EnhancedCalculationResults(
        magnetic_field_strength=base.magnetic_field_strength,
        tramp_metal_removal=base.tramp_metal_removal,
        thermal_performance=base.thermal_performance,
        recommended_model=base.recommended_model,
        validation=validate_calculation_results(base),
        recommended_tools=get_recommended_validation_tools(base),
        optimization=optimization,
    )
