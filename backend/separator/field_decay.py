"""
Magnetic field decay with air gap.

Surface readings (Gauss or Force Factor at zero gap) decay exponentially with
gap distance. The legacy constants are fixed rates; when a backplate thickness
is known, the regression-derived constants for that geometry are used instead.
Functions accept scalars or numpy arrays.
"""
import math
import re
from dataclasses import dataclass, asdict
from typing import Optional, Tuple

import numpy as np

from .constants import (
	DECAY_GAUSS, DECAY_FORCE_FACTOR,
	DECAY_GAUSS_COEFF, DECAY_GAUSS_EXP, DECAY_FF_COEFF,
	SURFACE_GAUSS_COEFF, SURFACE_GAUSS_CORE_EXP, SURFACE_GAUSS_BACKPLATE_EXP,
	SURFACE_FF_COEFF, GRADE_MULTIPLIERS,
)


@dataclass(frozen=True)
class MagnetGeometry:
	core_mm: float
	backplate_mm: float
	grade: str = 'A20'


@dataclass(frozen=True)
class MagneticFieldValues:
	surface_gauss: float
	surface_force_factor: float
	gauss_at_gap: float
	force_factor_at_gap: float
	decay_constant_gauss: float
	decay_constant_ff: float
	fifty_percent_reach_gauss_mm: float
	fifty_percent_reach_ff_mm: float

	def to_dict(self):
		return asdict(self)


def decay_constant_gauss(backplate_mm: Optional[float] = None) -> float:
	# K_gauss = 0.1485 / backplate^0.95
	if backplate_mm is None or backplate_mm <= 0:
		return DECAY_GAUSS
	return DECAY_GAUSS_COEFF / math.pow(backplate_mm, DECAY_GAUSS_EXP)


def decay_constant_force_factor(backplate_mm: Optional[float] = None) -> float:
	# K_ff = 0.3438 / backplate; its own regression, not 2 x K_gauss
	if backplate_mm is None or backplate_mm <= 0:
		return DECAY_FORCE_FACTOR
	return DECAY_FF_COEFF / backplate_mm


def gauss_at_gap(surface_gauss, gap_mm, backplate_mm: Optional[float] = None):
	"""Gauss at ``gap_mm`` from the surface reading. Inputs are not validated."""
	k = decay_constant_gauss(backplate_mm)
	return surface_gauss * np.exp(-k * np.asarray(gap_mm, dtype=float))


def force_factor_at_gap(surface_ff, gap_mm, backplate_mm: Optional[float] = None):
	"""Force Factor [N] at ``gap_mm`` from the surface reading."""
	k = decay_constant_force_factor(backplate_mm)
	return surface_ff * np.exp(-k * np.asarray(gap_mm, dtype=float))


def surface_gauss(magnet: MagnetGeometry) -> float:
	# G0 = 2701 * core^0.88 / backplate^1.08 * grade
	if magnet.core_mm <= 0 or magnet.backplate_mm <= 0:
		raise ValueError("Core and backplate dimensions must be > 0")
	if magnet.grade not in GRADE_MULTIPLIERS:
		raise ValueError(f"Unknown magnet grade: {magnet.grade}. Available: {list(GRADE_MULTIPLIERS.keys())}")
	return (SURFACE_GAUSS_COEFF * math.pow(magnet.core_mm, SURFACE_GAUSS_CORE_EXP)
		/ math.pow(magnet.backplate_mm, SURFACE_GAUSS_BACKPLATE_EXP)
		* GRADE_MULTIPLIERS[magnet.grade])


def surface_force_factor(surface_gauss_value: float, backplate_mm: float) -> float:
	# FF0 = 1.725 * G0^2 / backplate
	if backplate_mm <= 0:
		raise ValueError("Backplate thickness must be > 0")
	return SURFACE_FF_COEFF * surface_gauss_value ** 2 / backplate_mm


def magnetic_field_values(magnet: MagnetGeometry, gap_mm: float) -> MagneticFieldValues:
	g0 = surface_gauss(magnet)
	ff0 = surface_force_factor(g0, magnet.backplate_mm)
	k_gauss = decay_constant_gauss(magnet.backplate_mm)
	k_ff = decay_constant_force_factor(magnet.backplate_mm)
	return MagneticFieldValues(
		surface_gauss=g0,
		surface_force_factor=ff0,
		gauss_at_gap=float(g0 * math.exp(-k_gauss * gap_mm)),
		force_factor_at_gap=float(ff0 * math.exp(-k_ff * gap_mm)),
		decay_constant_gauss=k_gauss,
		decay_constant_ff=k_ff,
		fifty_percent_reach_gauss_mm=math.log(2) / k_gauss,
		fifty_percent_reach_ff_mm=math.log(2) / k_ff,
	)


_MODEL_NAME_PATTERNS = (
	re.compile(r'(\d+)\s*OCW\s*(\d+)', re.IGNORECASE),  # "70 OCW 30", "70OCW30"
	re.compile(r'(\d+)\s*-\s*(\d+)'),  # "70-30"
	re.compile(r'(\d+)\s+(\d+)'),  # "70 30"
)


def parse_model_name(model_name: str) -> Optional[Tuple[int, int]]:
	"""Return ``(core_mm, backplate_mm)`` from a model name, or None."""
	for pattern in _MODEL_NAME_PATTERNS:
		match = pattern.search(model_name or '')
		if match:
			return int(match.group(1)), int(match.group(2))
	return None
