import pytest

from separator.catalog import OCWUnit
from separator.inputs import CalculatorInputs


@pytest.fixture
def default_inputs():
    return CalculatorInputs()


@pytest.fixture
def units():
    return [
        OCWUnit(prefix=55, suffix=40, surface_gauss=2120, force_factor=610, watts=4100, width=1000, frame='F2'),
        OCWUnit(prefix=65, suffix=30, surface_gauss=2410, force_factor=890, watts=5200, width=1100, frame='F2'),
        OCWUnit(prefix=70, suffix=30, surface_gauss=2520, force_factor=1010, watts=6100, width=1200, frame='F3'),
        OCWUnit(prefix=80, suffix=50, surface_gauss=2640, force_factor=1320, watts=8400, width=1400, frame='F4'),
        OCWUnit(prefix=70, suffix=45, surface_gauss=2290, force_factor=940, watts=6600, width=1250, frame='F3'),
    ]
