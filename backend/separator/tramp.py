"""
Tramp metal pick-up check.

Lifting physics with geometry, orientation and burden factors:

    available = B^2 * A / (2 * mu0)        (Gauss path)
    available = FF0 * exp(-k_ff * gap)     (Force Factor path, preferred)
    required  = weight * base_sf * orientation_factor * burden_factor

The margin ratio (available / required) maps to a bounded confidence
percentage. Also holds the heuristic required-Force-Factor model used for
extraction checks.
"""
import math
from dataclasses import dataclass, field, asdict, replace
from typing import List, Optional, Dict, Any

from config import DEFAULT_SAFETY_FACTOR

from .constants import (
	MU0, GRAVITY, GAUSS_TO_TESLA, STEEL_DENSITY,
	CUBE_ORIENTATION_AREA, CORNER_EDGE_AREA, UNKNOWN_EDGE_AREA,
	ORIENTATION_FACTORS, DEFAULT_ORIENTATION_FACTOR,
	BURDEN_FACTORS, DEFAULT_BURDEN_FACTOR,
	CONFIDENCE_SEGMENTS, CONFIDENCE_CAP,
	MATERIAL_FACTORS, DEFAULT_MATERIAL_FACTOR, STABILITY_FACTORS,
	THIN_PLATE_RATIO, MIN_EASE_FACTOR,
)
from .field_decay import (
	MagnetGeometry, MagneticFieldValues, magnetic_field_values,
	decay_constant_gauss, decay_constant_force_factor,
)

TRAMP_SHAPES = ('plate', 'bar', 'cube', 'irregular')
ORIENTATIONS = ('flat', 'edge', 'corner', 'unknown')
BURDEN_SEVERITIES = ('none', 'light', 'moderate', 'heavy', 'severe')
PART_TYPES = ('generic', 'nut', 'bolt', 'plate')


class InvalidGeometryError(ValueError):
	"""Tramp geometry or field input cannot be evaluated."""


@dataclass
class TrampGeometry:
	shape: str
	length_mm: Optional[float] = None
	width_mm: Optional[float] = None
	thickness_mm: Optional[float] = None
	cube_size_mm: Optional[float] = None
	density_kg_m3: Optional[float] = None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'TrampGeometry':
		def num(*keys):
			for key in keys:
				if data.get(key) is not None:
					return float(data[key])
			return None

		shape = data.get('shape', 'bar')
		if shape not in TRAMP_SHAPES:
			raise InvalidGeometryError(f"Unknown tramp shape: {shape}. Available: {list(TRAMP_SHAPES)}")
		return cls(
			shape=shape,
			length_mm=num('length_mm', 'length'),
			width_mm=num('width_mm', 'width'),
			thickness_mm=num('thickness_mm', 'thickness', 'height_mm', 'height'),
			cube_size_mm=num('cube_size_mm', 'cubeSize_mm', 'cube_size'),
			density_kg_m3=num('density_kg_m3', 'density'),
		)


@dataclass(frozen=True)
class TrampPickupResult:
	mass_kg: float
	weight_N: float
	effective_area_m2: float
	orientation_factor: float
	burden_factor: float
	base_safety_factor: float
	combined_factor: float
	available_mag_force_N: float
	required_force_N: float
	margin_N: float
	margin_ratio: float
	is_likely_pickup: bool
	confidence_percent: int
	notes: List[str] = field(default_factory=list)
	magnetic_field_values: Optional[MagneticFieldValues] = None

	def to_dict(self):
		return asdict(self)


def estimate_mass(geometry: TrampGeometry) -> float:
	"""Mass [kg]; 0 when the needed dimensions are missing."""
	rho = geometry.density_kg_m3 if geometry.density_kg_m3 is not None else STEEL_DENSITY
	volume_m3 = 0.0
	if geometry.shape == 'cube' and geometry.cube_size_mm:
		s = geometry.cube_size_mm / 1000.0
		volume_m3 = s * s * s
	else:
		L = (geometry.length_mm or 0.0) / 1000.0
		W = (geometry.width_mm or 0.0) / 1000.0
		T = (geometry.thickness_mm or 0.0) / 1000.0
		if L > 0 and W > 0 and T > 0:
			volume_m3 = L * W * T
	return volume_m3 * rho


def effective_contact_area(geometry: TrampGeometry, orientation: str) -> float:
	"""Orientation-dependent face area presented to the magnet [m²]."""
	if geometry.shape == 'cube' and geometry.cube_size_mm:
		s = geometry.cube_size_mm / 1000.0
		return s * s * CUBE_ORIENTATION_AREA.get(orientation, CUBE_ORIENTATION_AREA['unknown'])

	L = (geometry.length_mm or 0.0) / 1000.0
	W = (geometry.width_mm or 0.0) / 1000.0
	T = (geometry.thickness_mm or 0.0) / 1000.0
	if L <= 0 or (W <= 0 and T <= 0):
		return 0.0

	large_face = L * max(W, T)
	small_edge = L * min(W, T)
	if orientation == 'flat':
		return large_face
	if orientation == 'edge':
		return small_edge
	if orientation == 'corner':
		return small_edge * CORNER_EDGE_AREA
	return small_edge * UNKNOWN_EDGE_AREA


def orientation_factor(orientation: str) -> float:
	return ORIENTATION_FACTORS.get(orientation, DEFAULT_ORIENTATION_FACTOR)


def burden_factor(severity: str) -> float:
	return BURDEN_FACTORS.get(severity, DEFAULT_BURDEN_FACTOR)


def available_force(flux_density_T: float, area_m2: float) -> float:
	"""Magnetic pressure force B²A/(2·mu0) [N]."""
	return flux_density_T * flux_density_T * area_m2 / (2 * MU0)


def margin_ratio_to_confidence(margin_ratio: float) -> int:
	"""Confidence percentage in [0, 99] for an available/required force ratio."""
	if margin_ratio <= 0 or math.isnan(margin_ratio):
		return 0
	lower = 0.0
	for upper, base, slope in CONFIDENCE_SEGMENTS:
		if margin_ratio < upper:
			# round half up
			return int(math.floor(base + (margin_ratio - lower) * slope + 0.5))
		lower = upper
	return CONFIDENCE_CAP


def _pickup_result(geometry, orientation, burden, safety_factor, available, area, gravity):
	if safety_factor <= 0:
		raise ValueError("Safety factor must be > 0")
	mass_kg = estimate_mass(geometry)
	weight_N = mass_kg * gravity
	ori = orientation_factor(orientation)
	bur = burden_factor(burden)
	combined = safety_factor * ori * bur
	required = weight_N * combined

	margin_N = available - required
	margin_ratio = available / required
	likely = margin_ratio >= 1.0

	notes = [
		f"Mass ≈ {mass_kg:.3f} kg, effective area ≈ {area * 1e4:.2f} cm².",
		f"Orientation factor = {ori:.2f}, burden factor = {bur:.2f}, base SF = {safety_factor:.2f}.",
		f"Available F ≈ {available:.1f} N, required ≈ {required:.1f} N (margin ratio ≈ {margin_ratio:.2f}).",
	]
	if likely:
		notes.append("Result: Likely to pull this tramp under the assumed conditions.")
	else:
		notes.append("Result: NOT LIKELY to reliably pull this tramp through burden.")

	return TrampPickupResult(
		mass_kg=mass_kg,
		weight_N=weight_N,
		effective_area_m2=area,
		orientation_factor=ori,
		burden_factor=bur,
		base_safety_factor=safety_factor,
		combined_factor=combined,
		available_mag_force_N=float(available),
		required_force_N=required,
		margin_N=float(margin_N),
		margin_ratio=float(margin_ratio),
		is_likely_pickup=bool(likely),
		confidence_percent=margin_ratio_to_confidence(margin_ratio),
		notes=notes,
	)


def _checked_contact_area(geometry, orientation):
	area = effective_contact_area(geometry, orientation)
	if area <= 0:
		raise InvalidGeometryError("Effective contact area is zero or invalid; check geometry.")
	if estimate_mass(geometry) <= 0:
		raise InvalidGeometryError("Estimated mass is zero; check tramp dimensions.")
	return area


def evaluate_tramp_pickup(geometry: TrampGeometry, orientation: str, burden: str, flux_density_T: float,
		base_safety_factor: float = DEFAULT_SAFETY_FACTOR, gravity: float = GRAVITY) -> TrampPickupResult:
	area = _checked_contact_area(geometry, orientation)
	if flux_density_T <= 0:
		raise InvalidGeometryError("flux_density_T must be > 0 for tramp pickup evaluation.")
	available = available_force(flux_density_T, area)
	return _pickup_result(geometry, orientation, burden, base_safety_factor, available, area, gravity)


def calculate_margin_ratio_from_gauss(surface_gauss: float, gap_mm: float, geometry: TrampGeometry,
		orientation: str = 'unknown', burden: str = 'moderate',
		safety_factor: float = DEFAULT_SAFETY_FACTOR,
		backplate_mm: Optional[float] = None) -> TrampPickupResult:
	"""Pickup check from a surface Gauss reading. Kept for compatibility;
	prefer :func:`calculate_margin_ratio_from_force`."""
	surface_tesla = surface_gauss * GAUSS_TO_TESLA
	flux_at_gap = surface_tesla * math.exp(-decay_constant_gauss(backplate_mm) * gap_mm)
	return evaluate_tramp_pickup(geometry, orientation, burden, flux_at_gap, base_safety_factor=safety_factor)


def calculate_margin_ratio_from_force(surface_force_factor: float, gap_mm: float, geometry: TrampGeometry,
		orientation: str = 'unknown', burden: str = 'moderate',
		safety_factor: float = DEFAULT_SAFETY_FACTOR,
		backplate_mm: Optional[float] = None) -> TrampPickupResult:
	"""Pickup check from a surface Force Factor [N]. The decayed FF is the
	available force; no flux/area conversion is involved."""
	area = _checked_contact_area(geometry, orientation)
	if surface_force_factor <= 0:
		raise InvalidGeometryError("surface_force_factor must be > 0 for tramp pickup evaluation.")
	force_at_gap = surface_force_factor * math.exp(-decay_constant_force_factor(backplate_mm) * gap_mm)
	return _pickup_result(geometry, orientation, burden, safety_factor, force_at_gap, area, GRAVITY)


def evaluate_pickup_from_magnet(magnet: MagnetGeometry, gap_mm: float, tramp: TrampGeometry,
		orientation: str = 'unknown', burden: str = 'moderate',
		safety_factor: float = DEFAULT_SAFETY_FACTOR) -> TrampPickupResult:
	field_values = magnetic_field_values(magnet, gap_mm)
	result = calculate_margin_ratio_from_force(
		field_values.surface_force_factor, gap_mm, tramp,
		orientation=orientation, burden=burden,
		safety_factor=safety_factor, backplate_mm=magnet.backplate_mm,
	)
	return replace(result, magnetic_field_values=field_values)


# -----------------------
# Extraction heuristic
# -----------------------

@dataclass
class TrampExtractionInput:
	width_mm: float
	length_mm: float
	height_mm: float
	belt_speed_mps: float = 1.5
	burden_mm: float = 0.0
	water_percent: float = 0.0
	material: str = 'coal'
	description: str = ''
	part_type: str = 'generic'


@dataclass(frozen=True)
class TrampExtractionResult:
	required_force_factor: float
	moment_factor: float
	difficulty_multiplier: float
	stability_factor: float
	effective_type: str

	def to_dict(self):
		return asdict(self)


def calculate_required_force_factor(data: TrampExtractionInput) -> TrampExtractionResult:
	"""Required Force Factor to extract a tramp piece.

	Compare against a model's FF at gap: extraction ratio = FF(gap) / required.
	"""
	width = max(data.width_mm, 0.001)
	length = max(data.length_mm, 0.001)
	height = max(data.height_mm, 0.001)
	speed = max(data.belt_speed_mps, 0.0)
	burden = max(data.burden_mm, 0.0)
	water = min(max(data.water_percent, 0.0), 100.0)
	material_factor = MATERIAL_FACTORS.get((data.material or 'coal').lower(), DEFAULT_MATERIAL_FACTOR)

	speed_loss = 1 - min(speed / 8.0, 0.50)
	embedding_loss = 1 - min(math.pow(burden / 800.0, 0.7), 0.50)
	water_penalty = 1 - min(water / 50.0, 0.40)

	major = max(width, length)
	minor = min(width, length)
	aspect_ratio = major / max(1.0, minor)
	thinness = height / max(1.0, minor)
	shape_penalty = 0.9 - 0.25 * (aspect_ratio - 1) - 0.3 * (0.2 - thinness if thinness < 0.2 else 0.0)
	shape_penalty = max(0.25, min(1.0, shape_penalty))

	volume_cm3 = width * length * height / 1000.0
	mass_g = volume_cm3 * 7.85
	moment_factor = mass_g * math.sqrt(max(0.0001, volume_cm3))

	ease = shape_penalty * material_factor * embedding_loss * speed_loss * water_penalty
	difficulty = 1 / max(ease, MIN_EASE_FACTOR)

	effective_type = data.part_type if data.part_type in PART_TYPES else 'generic'
	if effective_type == 'generic':
		desc = (data.description or '').lower()
		if 'nut' in desc:
			effective_type = 'nut'
		elif 'bolt' in desc:
			effective_type = 'bolt'
		elif height < THIN_PLATE_RATIO * min(width, length):
			effective_type = 'plate'
	stability = STABILITY_FACTORS[effective_type]

	return TrampExtractionResult(
		required_force_factor=moment_factor * difficulty * stability,
		moment_factor=moment_factor,
		difficulty_multiplier=difficulty,
		stability_factor=stability,
		effective_type=effective_type,
	)
