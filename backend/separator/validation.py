"""
Advisory validation of calculation results.

Physical-limit violations never raise; they are collected into a
ValidationResult with a severity of critical, warning or info.
"""
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List

SAFETY_THRESHOLDS = {
    'max_temperature': 300.0,  # °C
    'max_magnetic_field': 2.0,  # T
    'max_removal_efficiency': 1.0,
    'warning_temperature': 250.0,
    'warning_magnetic_field': 1.8,
    'warning_removal_efficiency': 0.95,
}

EQUIPMENT_RATINGS = {
    'PCB (Permanent Magnet)': {
        'model': 'PCB',
        'max_power_loss': 5.0,  # kW
        'max_operating_temp': 200.0,  # °C
        'max_magnetic_field': 1.5,  # T
        'thermal_rating': 500.0,  # W/m²
    },
    'EMAX (Air Cooled)': {
        'model': 'EMAX',
        'max_power_loss': 15.0,
        'max_operating_temp': 150.0,
        'max_magnetic_field': 2.2,
        'thermal_rating': 800.0,
    },
    'EMAX-W (Wide Belt Air Cooled)': {
        'model': 'EMAX-W',
        'max_power_loss': 20.0,
        'max_operating_temp': 150.0,
        'max_magnetic_field': 2.2,
        'thermal_rating': 900.0,
    },
    'OCW (Oil Cooled)': {
        'model': 'OCW',
        'max_power_loss': 25.0,
        'max_operating_temp': 120.0,
        'max_magnetic_field': 2.5,
        'thermal_rating': 1200.0,
    },
    'OCW-HD (Heavy Duty Oil Cooled)': {
        'model': 'OCW-HD',
        'max_power_loss': 40.0,
        'max_operating_temp': 120.0,
        'max_magnetic_field': 2.5,
        'thermal_rating': 1500.0,
    },
}

VALIDATION_TOOLS = {
    'comsol': {
        'name': 'COMSOL Multiphysics',
        'description': 'Electromagnetic field analysis and thermal modeling',
        'export_format': '.mph',
        'use_case': 'Detailed FEA simulation for magnetic field distribution and thermal analysis',
    },
    'ansys': {
        'name': 'ANSYS Maxwell',
        'description': 'Magnetic circuit optimization and field analysis',
        'export_format': '.aedtresults',
        'use_case': 'Electromagnetic design optimization and performance validation',
    },
    'matlab': {
        'name': 'MATLAB Magnetic Modeling Toolbox',
        'description': 'Algorithm verification and custom modeling',
        'export_format': '.mat',
        'use_case': 'Custom algorithm development and calculation verification',
    },
}


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str
    value: float
    threshold: float
    recommendation: str


@dataclass(frozen=True)
class ValidationWarning:
    field: str
    message: str
    value: float
    threshold: float
    suggestion: str


@dataclass(frozen=True)
class EquipmentComplianceStatus:
    power_compliance: bool
    thermal_compliance: bool
    magnetic_compliance: bool
    overall_compliance: bool
    rating: Dict[str, Any]


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    severity: str
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    equipment_compliance: EquipmentComplianceStatus = None

    def to_dict(self):
        return asdict(self)


def validate_calculation_results(results) -> ValidationResult:
    field_t = results.magnetic_field_strength.tesla
    efficiency = results.tramp_metal_removal.overall_efficiency
    temperature_rise = results.thermal_performance.temperature_rise
    power_loss_kw = results.thermal_performance.total_power_loss / 1000.0
    rating = EQUIPMENT_RATINGS.get(results.recommended_model.model, EQUIPMENT_RATINGS['OCW (Oil Cooled)'])

    errors = []
    warnings = []

    if temperature_rise > SAFETY_THRESHOLDS['max_temperature']:
        errors.append(ValidationError(
            field='temperature_rise',
            message='CRITICAL: Temperature exceeds safe operating limit',
            value=temperature_rise,
            threshold=SAFETY_THRESHOLDS['max_temperature'],
            recommendation='Reduce current, increase cooling, or select different magnet configuration',
        ))
    if field_t > SAFETY_THRESHOLDS['max_magnetic_field']:
        errors.append(ValidationError(
            field='magnetic_field',
            message='CRITICAL: Magnetic field exceeds design limit',
            value=field_t,
            threshold=SAFETY_THRESHOLDS['max_magnetic_field'],
            recommendation='Reduce ampere-turns or increase magnet gap',
        ))
    if efficiency > SAFETY_THRESHOLDS['max_removal_efficiency']:
        errors.append(ValidationError(
            field='removal_efficiency',
            message='CRITICAL: Calculated efficiency exceeds physical limit',
            value=efficiency,
            threshold=SAFETY_THRESHOLDS['max_removal_efficiency'],
            recommendation='Review input parameters - calculation may be invalid',
        ))
    if power_loss_kw > rating['max_power_loss']:
        errors.append(ValidationError(
            field='power_loss',
            message='CRITICAL: Power loss exceeds equipment rating',
            value=power_loss_kw,
            threshold=rating['max_power_loss'],
            recommendation='Select higher rated equipment or reduce power requirements',
        ))

    if temperature_rise > SAFETY_THRESHOLDS['warning_temperature']:
        warnings.append(ValidationWarning(
            field='temperature_rise',
            message='WARNING: Temperature approaching safe limit',
            value=temperature_rise,
            threshold=SAFETY_THRESHOLDS['warning_temperature'],
            suggestion='Consider enhanced cooling or reduced operating parameters',
        ))
    if field_t > SAFETY_THRESHOLDS['warning_magnetic_field']:
        warnings.append(ValidationWarning(
            field='magnetic_field',
            message='WARNING: Magnetic field approaching design limit',
            value=field_t,
            threshold=SAFETY_THRESHOLDS['warning_magnetic_field'],
            suggestion='Monitor field strength and consider safety margins',
        ))
    if efficiency > SAFETY_THRESHOLDS['warning_removal_efficiency']:
        warnings.append(ValidationWarning(
            field='removal_efficiency',
            message='WARNING: High efficiency - verify calculation accuracy',
            value=efficiency,
            threshold=SAFETY_THRESHOLDS['warning_removal_efficiency'],
            suggestion='Cross-validate with empirical data or field testing',
        ))

    power_ok = power_loss_kw <= rating['max_power_loss']
    thermal_ok = temperature_rise <= rating['max_operating_temp']
    magnetic_ok = field_t <= rating['max_magnetic_field']
    compliance = EquipmentComplianceStatus(
        power_compliance=power_ok,
        thermal_compliance=thermal_ok,
        magnetic_compliance=magnetic_ok,
        overall_compliance=power_ok and thermal_ok and magnetic_ok,
        rating=dict(rating),
    )

    if errors:
        severity = 'critical'
    elif warnings:
        severity = 'warning'
    else:
        severity = 'info'

    return ValidationResult(
        is_valid=not errors,
        severity=severity,
        errors=errors,
        warnings=warnings,
        equipment_compliance=compliance,
    )


def get_recommended_validation_tools(results) -> List[str]:
    tools = ['comsol']
    if results.magnetic_field_strength.tesla > 1.5:
        tools.append('ansys')
    if (results.tramp_metal_removal.overall_efficiency > 0.90
            or results.thermal_performance.temperature_rise > 200):
        tools.append('matlab')
    return tools


def generate_validation_export_data(results, validation: ValidationResult) -> Dict[str, Any]:
    return {
        'calculation_results': asdict(results),
        'validation': {
            'status': 'PASS' if validation.is_valid else 'FAIL',
            'severity': validation.severity.upper(),
            'error_count': len(validation.errors),
            'warning_count': len(validation.warnings),
            'equipment_compliance': 'COMPLIANT' if validation.equipment_compliance.overall_compliance else 'NON-COMPLIANT',
        },
        'safety_checks': {
            'temperature_check': results.thermal_performance.temperature_rise <= SAFETY_THRESHOLDS['max_temperature'],
            'magnetic_field_check': results.magnetic_field_strength.tesla <= SAFETY_THRESHOLDS['max_magnetic_field'],
            'efficiency_check': results.tramp_metal_removal.overall_efficiency <= SAFETY_THRESHOLDS['max_removal_efficiency'],
        },
        'recommendations': [e.recommendation for e in validation.errors] + [w.suggestion for w in validation.warnings],
    }


def export_rows(results, validation: ValidationResult) -> List[List[str]]:
    """CSV rows for the validated design export."""
    data = generate_validation_export_data(results, validation)
    checks = data['safety_checks']
    mfs = results.magnetic_field_strength
    removal = results.tramp_metal_removal
    thermal = results.thermal_performance

    def status(ok):
        return 'SAFE' if ok else 'UNSAFE'

    rows = [
        ['Parameter', 'Value', 'Unit', 'Status'],
        ['Validation Status', data['validation']['status'], '', ''],
        ['Severity Level', data['validation']['severity'], '', ''],
        ['Equipment Compliance', data['validation']['equipment_compliance'], '', ''],
        ['Error Count', str(data['validation']['error_count']), '', ''],
        ['Warning Count', str(data['validation']['warning_count']), '', ''],
        [],
        ['CALCULATION RESULTS'],
        ['Magnetic Field Strength (Tesla)', f"{mfs.tesla:.4f}", 'T', status(checks['magnetic_field_check'])],
        ['Magnetic Field Strength (Gauss)', f"{mfs.gauss:.1f}", 'G', ''],
        ['Penetration Depth', f"{mfs.penetration_depth:.1f}", 'mm', ''],
        ['Overall Removal Efficiency', f"{removal.overall_efficiency * 100:.1f}", '%', status(checks['efficiency_check'])],
        ['Fine Particles Removal', f"{removal.fine_particles * 100:.1f}", '%', ''],
        ['Medium Particles Removal', f"{removal.medium_particles * 100:.1f}", '%', ''],
        ['Large Particles Removal', f"{removal.large_particles * 100:.1f}", '%', ''],
        ['Total Power Loss', f"{thermal.total_power_loss:.1f}", 'W', ''],
        ['Temperature Rise', f"{thermal.temperature_rise:.1f}", '°C', status(checks['temperature_check'])],
        ['Cooling Efficiency', f"{thermal.cooling_efficiency:.2f}", '', ''],
        ['Recommended Model', results.recommended_model.model, '', ''],
        ['Model Score', f"{results.recommended_model.score:.1f}", '', ''],
        [],
        ['VALIDATION RECOMMENDATIONS'],
    ]
    for index, rec in enumerate(data['recommendations'], start=1):
        rows.append([f"Recommendation {index}", rec, '', ''])
    return rows
