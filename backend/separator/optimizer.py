"""
Greedy search for a target removal efficiency.

Each iteration tries one nudge on each of four parameters (gap down,
core:belt ratio up, belt speed down, feed depth down), clamped to fixed
bounds, and keeps the move with the best efficiency. Stops at the target,
when no move improves, or at the iteration cap. No convergence guarantee.
"""
import copy
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List

import numpy as np

from config import DEFAULT_TARGET_EFFICIENCY, DEFAULT_MAX_ITERATIONS

from .constants import OPTIMIZER_STEPS, OPTIMIZER_BOUNDS
from .calculations import calculate_efficiency
from .inputs import CalculatorInputs

logger = logging.getLogger(__name__)

# parameter -> (input group, attribute)
PARAMETERS = {
    'gap': ('magnetic', 'magnet_gap'),
    'core_belt_ratio': ('magnetic', 'core_belt_ratio'),
    'belt_speed': ('geometric', 'belt_speed'),
    'feed_depth': ('geometric', 'material_layer_thickness'),
}


@dataclass(frozen=True)
class ParameterChange:
    parameter: str
    original_value: float
    optimized_value: float
    change: float  # %


@dataclass(frozen=True)
class OptimizationResult:
    success: bool
    target_efficiency: float
    achieved_efficiency: float
    iterations: int
    optimized_parameters: Dict[str, float]
    parameter_changes: List[ParameterChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_parameter(inputs: CalculatorInputs, name: str) -> float:
    group, attr = PARAMETERS[name]
    return float(getattr(getattr(inputs, group), attr))


def set_parameter(inputs: CalculatorInputs, name: str, value: float):
    group, attr = PARAMETERS[name]
    setattr(getattr(inputs, group), attr, value)


def _clamp(name, value):
    low, high = OPTIMIZER_BOUNDS[name]
    return float(np.clip(value, low, high))


def optimize_for_target_efficiency(inputs: CalculatorInputs, target_efficiency: float = DEFAULT_TARGET_EFFICIENCY,
                                   max_iterations: int = DEFAULT_MAX_ITERATIONS) -> OptimizationResult:
    """Nudge gap, core:belt ratio, belt speed and feed depth towards the target.

    The caller's inputs are not modified.
    """
    original = {name: get_parameter(inputs, name) for name in PARAMETERS}

    working = copy.deepcopy(inputs)
    for name in PARAMETERS:
        set_parameter(working, name, _clamp(name, original[name]))
    best = calculate_efficiency(working)

    iterations = 0
    while iterations < max_iterations and best < target_efficiency:
        iterations += 1
        best_move = None
        for name, step in OPTIMIZER_STEPS.items():
            current = get_parameter(working, name)
            candidate_value = _clamp(name, current + step)
            if candidate_value == current:
                continue
            candidate = copy.deepcopy(working)
            set_parameter(candidate, name, candidate_value)
            efficiency = calculate_efficiency(candidate)
            if efficiency > best and (best_move is None or efficiency > best_move[2]):
                best_move = (name, candidate_value, efficiency)

        if best_move is None:
            logger.debug("Optimizer plateaued at %.4f after %d iterations", best, iterations)
            break
        name, value, best = best_move
        set_parameter(working, name, value)

    optimized = {name: get_parameter(working, name) for name in PARAMETERS}
    changes = []
    for name in PARAMETERS:
        before = original[name]
        after = optimized[name]
        if after != before:
            pct = (after - before) / before * 100.0 if before else 0.0
            changes.append(ParameterChange(name, before, after, pct))

    logger.info("Optimization %s: %.3f (target %.3f) in %d iterations",
                'reached target' if best >= target_efficiency else 'stopped',
                best, target_efficiency, iterations)
    return OptimizationResult(
        success=best >= target_efficiency,
        target_efficiency=target_efficiency,
        achieved_efficiency=best,
        iterations=iterations,
        optimized_parameters=optimized,
        parameter_changes=changes,
    )
