"""
Calibration constants for the separator sizing calculations.

These are physical and engineering calibration values, not settings.
Nothing in the package mutates them at runtime.
"""
import math

# Permeability of free space [H/m]
MU0 = 4 * math.pi * 1e-7
GRAVITY = 9.81  # m/s²
GAUSS_TO_TESLA = 1e-4

# Field decay with gap (per mm)
DECAY_GAUSS = 0.00575
DECAY_FORCE_FACTOR = 0.0115  # lifting force goes with B², so twice the Gauss rate

# Regression decay / surface field coefficients (backplate-dependent)
DECAY_GAUSS_COEFF = 0.1485
DECAY_GAUSS_EXP = 0.95
DECAY_FF_COEFF = 0.3438
SURFACE_GAUSS_COEFF = 2701.0
SURFACE_GAUSS_CORE_EXP = 0.88
SURFACE_GAUSS_BACKPLATE_EXP = 1.08
SURFACE_FF_COEFF = 1.725

GRADE_MULTIPLIERS = {
    'A20': 1.000,  # standard conditions
    'A30': 0.949,
    'A40': 0.893,
    'A45': 0.865,  # severe conditions
}

# Ambient temperature classes: (Gauss scale, FF scale). FF drops harder.
TEMPERATURE_CLASSES = {
    20: {'label': 'A20', 'gauss_scale': 1.000, 'ff_scale': 1.000},
    30: {'label': 'A30', 'gauss_scale': 0.95484, 'ff_scale': 0.9117},
    40: {'label': 'A40', 'gauss_scale': 0.90451, 'ff_scale': 0.8181},
    45: {'label': 'A45', 'gauss_scale': 0.87739, 'ff_scale': 0.7694},
}

# Tramp metal
STEEL_DENSITY = 7850.0  # kg/m³, mild steel

CUBE_ORIENTATION_AREA = {
    'flat': 1.0,
    'edge': 0.75,
    'corner': 0.5,
    'unknown': 0.6,
}
CORNER_EDGE_AREA = 0.6
UNKNOWN_EDGE_AREA = 0.8

ORIENTATION_FACTORS = {
    'flat': 1.0,
    'edge': 4.0,
    'corner': 6.0,
    'unknown': 5.0,
}
DEFAULT_ORIENTATION_FACTOR = 5.0

BURDEN_FACTORS = {
    'none': 1.0,
    'light': 1.5,
    'moderate': 2.5,
    'heavy': 4.0,
    'severe': 6.0,
}
DEFAULT_BURDEN_FACTOR = 3.0

# (upper ratio bound, confidence at lower bound, slope) for each segment
CONFIDENCE_SEGMENTS = (
    (0.5, 0.0, 50.0),
    (0.8, 25.0, 50.0),
    (1.0, 40.0, 50.0),
    (1.5, 50.0, 50.0),
    (2.0, 75.0, 30.0),
    (3.0, 90.0, 8.0),
)
CONFIDENCE_CAP = 99

# Extraction heuristic
MATERIAL_FACTORS = {
    'coal': 0.90,
    'limestone': 0.75,
    'gravel': 0.70,
    'sand': 0.55,
    'slag': 0.50,
    'wood': 0.85,
    'aggregate': 0.70,
    'glass': 0.60,
    'c&d': 0.65,
    'compost': 0.60,
    'msw': 0.50,
}
DEFAULT_MATERIAL_FACTOR = 0.75
STABILITY_FACTORS = {
    'generic': 1.0,
    'nut': 1.8,   # hollow, poor contact
    'bolt': 1.3,  # elongated, rolls
    'plate': 1.5,  # flat, poor grip
}
THIN_PLATE_RATIO = 0.15
MIN_EASE_FACTOR = 0.05

# Aggregate pipeline
AMPERE_TURNS_PER_MM_CORE = 30.0
LEAKAGE_GAP_MM = 12.0
B_SAT = 1.8  # T, steel saturation proxy
FIELD_DECAY_EXPONENT = 2.5
PENETRATION_FRACTION = 0.1

LOGISTIC_STEEPNESS = 4.0
LOGISTIC_CENTER = 1.0
BURDEN_DRAG_COEFF = 0.25

SPEED_DERATE = 0.08  # per m/s above 1.0
SPEED_REFERENCE = 1.0
DEPTH_DERATE = 0.002  # per mm above 50
DEPTH_REFERENCE = 50.0
TROUGH_DERATE = 0.004  # per degree
TEMPERATURE_DERATE = 0.005  # per °C above 25
REFERENCE_TEMPERATURE = 25.0
ALTITUDE_DERATE = 0.02  # per km
MOISTURE_DERATE = 0.01  # per % water

# (upper average tramp size mm, (fine, medium, large) multipliers)
SIZE_BANDS = (
    (10.0, (0.90, 1.00, 1.05)),
    (20.0, (0.80, 0.95, 1.05)),
    (math.inf, (0.70, 0.90, 1.10)),
)
MAX_OVERALL_EFFICIENCY = 0.99
MAX_FINE_EFFICIENCY = 0.98
MAX_MEDIUM_EFFICIENCY = 0.99
MAX_LARGE_EFFICIENCY = 0.995

POWER_LOSS_COEFF = 2.0e-5  # W per (A·turn)²
THERMAL_RESISTANCE = {  # °C/W
    'electromagnetic-oil': 0.004,
    'electromagnetic-air': 0.006,
    'permanent': 0.002,
}
ALTITUDE_COOLING_LOSS = 0.12  # per km
TEMPERATURE_COOLING_LOSS = 0.10  # per 10 °C above reference
MIN_COOLING_FACTOR = 0.5

# Optimizer
OPTIMIZER_STEPS = {
    'gap': -10.0,
    'core_belt_ratio': 0.05,
    'belt_speed': -0.1,
    'feed_depth': -10.0,
}
OPTIMIZER_BOUNDS = {
    'gap': (50.0, 300.0),
    'core_belt_ratio': (0.3, 0.9),
    'belt_speed': (0.5, 4.0),
    'feed_depth': (10.0, 200.0),
}
