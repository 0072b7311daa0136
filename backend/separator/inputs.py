"""
Calculator input records.

Ranges in the comments are the documented physical ranges; they are not
enforced here and out-of-range values flow straight into the calculations.
"""
import re
from dataclasses import dataclass, field, asdict
from typing import Dict, Any


def _snake(name: str) -> str:
	return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _normalise(data: Dict[str, Any]) -> Dict[str, Any]:
	return {_snake(k): v for k, v in (data or {}).items()}


def _build(cls, data):
	values = _normalise(data)
	kwargs = {}
	for name in cls.__dataclass_fields__:
		if name in values and values[name] is not None:
			kwargs[name] = values[name]
	return cls(**kwargs)


@dataclass
class GeometricParameters:
	belt_width: float = 1200.0  # 450-2400 mm
	suspension_height: float = 400.0  # 0-800 mm
	element_length: float = 25.0
	element_width: float = 15.0
	element_height: float = 8.0
	belt_speed: float = 2.5  # m/s
	feed_rate: float = 100.0  # t/h
	material_layer_thickness: float = 100.0  # mm, feed depth
	trough_angle: float = 20.0  # degrees


@dataclass
class MagneticSystemInputs:
	power_source_type: str = 'electromagnetic-oil'  # electromagnetic-air | electromagnetic-oil | permanent
	ampere_turns: float = 5000.0
	number_of_turns: float = 500.0
	current: float = 10.0
	magnet_gap: float = 150.0  # mm
	core_belt_ratio: float = 0.6
	number_of_poles: int = 2
	pole_configuration: str = 'single'


@dataclass
class TrampSizeRange:
	min: float = 5.0  # mm
	max: float = 50.0


@dataclass
class MaterialSeparationMetrics:
	material_type: str = 'coal'
	bulk_density: float = 1.6  # t/m³
	water_content: float = 8.0  # %
	tramp_metal_size: TrampSizeRange = field(default_factory=TrampSizeRange)
	magnetic_susceptibility: float = 0.003
	particle_distribution: str = 'mixed'
	flow_characteristics: str = 'free-flowing'
	contamination_level: float = 0.1  # % of tramp in feed

	@property
	def average_tramp_size(self) -> float:
		return (self.tramp_metal_size.min + self.tramp_metal_size.max) / 2.0


@dataclass
class EnvironmentalConstraints:
	operating_temperature: float = 25.0  # °C
	altitude: float = 0.0  # m
	humidity: float = 50.0  # %
	dust_exposure: str = 'medium'
	vibration_level: str = 'low'


@dataclass
class CalculatorInputs:
	geometric: GeometricParameters = field(default_factory=GeometricParameters)
	magnetic: MagneticSystemInputs = field(default_factory=MagneticSystemInputs)
	material: MaterialSeparationMetrics = field(default_factory=MaterialSeparationMetrics)
	environmental: EnvironmentalConstraints = field(default_factory=EnvironmentalConstraints)

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'CalculatorInputs':
		"""Build from a request body; camelCase or snake_case keys, missing fields take defaults."""
		data = data or {}
		material_data = _normalise(data.get('material'))
		size = material_data.pop('tramp_metal_size', None)
		material = _build(MaterialSeparationMetrics, material_data)
		if size:
			material.tramp_metal_size = _build(TrampSizeRange, size)
		return cls(
			geometric=_build(GeometricParameters, data.get('geometric')),
			magnetic=_build(MagneticSystemInputs, data.get('magnetic')),
			material=material,
			environmental=_build(EnvironmentalConstraints, data.get('environmental')),
		)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)
