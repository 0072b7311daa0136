"""
OCW catalog lookups.

Catalog rows are read-only inputs (Prefix = core, Suffix = backplate,
surface_gauss, force_factor, watts, width, frame). This module filters them
for a conveyor, builds decay tables and sweeps a model against tramp
requirements over a range of gaps.
"""
import json
import logging
import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Iterable

import numpy as np

from config import DEFAULT_SAFETY_FACTOR, DEFAULT_AMBIENT_CLASS

from .constants import TEMPERATURE_CLASSES, GRAVITY
from .field_decay import gauss_at_gap, force_factor_at_gap
from .tramp import TrampGeometry, estimate_mass, orientation_factor, burden_factor, margin_ratio_to_confidence

logger = logging.getLogger(__name__)

TRAMP_OBJECTS = [
    {'name': '25mm Cube', 'threshold': 200},
    {'name': 'M12 Nut', 'threshold': 300},
    {'name': 'M16×75 Bolt', 'threshold': 350},
    {'name': '6mm Plate', 'threshold': 700},
]

# Burden severity S(v, g, d) reference point and exponents
SEVERITY_CONSTANTS = {
    'v0': 2.0,  # m/s
    'g0': 200.0,  # mm
    'd0': 100.0,  # mm
    'k': 0.5,  # burden -> gap conversion
    'a': 0.4,
    'b': 1.7,
    'c': 0.5,
}
MARGIN_SAFETY_FACTOR = 1.5


@dataclass(frozen=True)
class OCWUnit:
    prefix: int
    suffix: int
    surface_gauss: float
    force_factor: float
    watts: float
    width: float
    frame: Optional[str] = None

    @property
    def model_name(self) -> str:
        return f"{self.prefix} OCW {self.suffix}"

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'OCWUnit':
        return cls(
            prefix=int(row.get('Prefix', row.get('prefix'))),
            suffix=int(row.get('Suffix', row.get('suffix'))),
            surface_gauss=float(row.get('surface_gauss') or 0.0),
            force_factor=float(row.get('force_factor') or 0.0),
            watts=float(row.get('watts') or 0.0),
            width=float(row.get('width') or 0.0),
            frame=row.get('frame'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['model'] = self.model_name
        return data


def load_catalog(path: str) -> List[OCWUnit]:
    with open(path, 'r') as f:
        rows = json.load(f)
    units = [OCWUnit.from_row(row) for row in rows]
    logger.info("Loaded %d catalog units from %s", len(units), path)
    return units


def find_unit(units: Iterable[OCWUnit], prefix: int, suffix: int) -> Optional[OCWUnit]:
    for unit in units:
        if unit.prefix == prefix and unit.suffix == suffix:
            return unit
    return None


def recommend_units(units: Iterable[OCWUnit], belt_width: float, core_belt_ratio: float,
                    min_gauss: float = 0.0, min_force: float = 0.0) -> List[OCWUnit]:
    """Units with enough backplate for the core:belt ratio and a width within -10%/+20% of the belt."""
    min_suffix = int(math.floor(belt_width * core_belt_ratio / 10.0 + 0.5))
    width_min = belt_width * 0.9
    width_max = belt_width * 1.2

    matches = [
        unit for unit in units
        if unit.suffix >= min_suffix
        and width_min <= unit.width <= width_max
        and (not min_gauss or unit.surface_gauss >= min_gauss)
        and (not min_force or unit.force_factor >= min_force)
    ]
    return sorted(matches, key=lambda u: (u.suffix, u.prefix))


def gauss_table(unit: OCWUnit, max_gap: float = 800, step: float = 25) -> List[Dict[str, Any]]:
    """Gauss and Force Factor at each gap for every ambient temperature class."""
    gaps = np.arange(0, max_gap + step, step)
    gaps = gaps[gaps <= max_gap]
    gauss = gauss_at_gap(unit.surface_gauss, gaps)
    ff = force_factor_at_gap(unit.force_factor, gaps)

    rows = []
    for i, gap in enumerate(gaps):
        row = {'gap': float(gap)}
        for cfg in TEMPERATURE_CLASSES.values():
            label = cfg['label']
            row[f"gauss_{label}"] = int(round(gauss[i] * cfg['gauss_scale']))
            row[f"ff_{label}"] = int(round(ff[i] * cfg['ff_scale']))
        rows.append(row)
    return rows


def magnet_models(units: Iterable[OCWUnit]) -> List[Dict[str, Any]]:
    models = []
    for unit in units:
        # larger backplate -> slower decay
        k = 0.008 - unit.suffix / 10000.0 if unit.suffix else 0.005
        models.append({
            'name': unit.model_name,
            'G0': unit.surface_gauss,
            'k': min(0.008, max(0.003, k)),
            'width': unit.width,
            'prefix': unit.prefix,
            'suffix': unit.suffix,
            'frame': unit.frame,
        })
    return models


def filter_by_belt_width(units: Iterable[OCWUnit], belt_width: float) -> List[OCWUnit]:
    return [u for u in units if belt_width * 0.8 <= u.width <= belt_width * 1.3]


def severity(belt_speed: float, gap: float, burden_depth: float) -> float:
    c = SEVERITY_CONSTANTS
    h = gap + c['k'] * burden_depth
    h0 = c['g0'] + c['k'] * c['d0']
    return (math.pow(belt_speed / c['v0'], c['a'])
            * math.pow(h / h0, c['b'])
            * math.pow(burden_depth / c['d0'], c['c']))


def tramp_required_force(geometry: TrampGeometry, orientation: str, burden: str,
                         safety_factor: float = DEFAULT_SAFETY_FACTOR) -> float:
    weight = estimate_mass(geometry) * GRAVITY
    return weight * orientation_factor(orientation) * burden_factor(burden) * safety_factor


def classify_margin(required_force: float, available_force: float) -> Dict[str, str]:
    ratio = available_force / required_force if required_force > 0 else math.inf
    if ratio >= MARGIN_SAFETY_FACTOR * 1.2:
        return {'status': 'excellent', 'message': 'Exceeds requirements with excellent margin'}
    if ratio >= MARGIN_SAFETY_FACTOR:
        return {'status': 'adequate', 'message': 'Meets requirements with adequate safety factor'}
    if ratio >= 1.0:
        return {'status': 'marginal', 'message': 'Barely meets requirements - consider larger model'}
    return {'status': 'insufficient', 'message': 'Insufficient for requirements'}


def compare_model(unit: OCWUnit, tramp_items: List[Dict[str, Any]], burden: str = 'moderate',
                  safety_factor: float = DEFAULT_SAFETY_FACTOR, ambient: int = DEFAULT_AMBIENT_CLASS,
                  belt_speed: float = 2.0, burden_depth: float = 100.0,
                  max_gap: float = 800, step: float = 25) -> List[Dict[str, Any]]:
    """Sweep gap and compare the unit's temperature-scaled force with the worst tramp item.

    Each tramp item is a dict with a 'geometry' (TrampGeometry) and 'orientation'.
    """
    if ambient not in TEMPERATURE_CLASSES:
        raise ValueError(f"Unknown ambient class: {ambient}. Available: {list(TEMPERATURE_CLASSES.keys())}")
    required = max(
        (tramp_required_force(item['geometry'], item.get('orientation', 'flat'), burden, safety_factor)
         for item in tramp_items),
        default=0.0,
    )
    cfg = TEMPERATURE_CLASSES[ambient]

    points = []
    for gap in np.arange(0, max_gap + step, step):
        if gap > max_gap:
            break
        gap = float(gap)
        force = float(force_factor_at_gap(unit.force_factor, gap)) * cfg['ff_scale']
        gauss = float(gauss_at_gap(unit.surface_gauss, gap)) * cfg['gauss_scale']
        ratio = force / required if required > 0 else math.inf
        points.append({
            'gap': gap,
            'severity': round(severity(belt_speed, gap, burden_depth), 2),
            'required_force': round(required),
            'gauss': round(gauss),
            'model_force': round(force),
            'model_watts': unit.watts,
            'sufficient': force >= required,
            'margin': (force - required) / required * 100.0 if required > 0 else None,
            'confidence_percent': margin_ratio_to_confidence(ratio) if required > 0 else None,
        })
    return points
