"""
Configuration file for the Magnetic Separator Sizing backend
Modify these values to customize server and calculation defaults
"""
import os

# Server Configuration
HOST = '0.0.0.0'
PORT = 5000
DEBUG = True
CORS_ORIGINS = "*"

# Catalog
# JSON list of catalog rows: Prefix, Suffix, surface_gauss, force_factor, watts, width, frame
CATALOG_FILE = os.environ.get(
    'SEPARATOR_CATALOG_FILE',
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'ocw_catalog.json'),
)

# Tramp Pickup
DEFAULT_SAFETY_FACTOR = 3.0
DEFAULT_ORIENTATION = 'unknown'
DEFAULT_BURDEN = 'moderate'

# Optimizer
DEFAULT_TARGET_EFFICIENCY = 0.95
DEFAULT_MAX_ITERATIONS = 100

# Gauss Table / Model Comparison
GAUSS_TABLE_MAX_GAP = 800  # mm
GAUSS_TABLE_STEP = 25  # mm
COMPARISON_MAX_GAP = 800  # mm
DEFAULT_AMBIENT_CLASS = 20  # °C

# Logging
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
