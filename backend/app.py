from flask import Flask, request, jsonify, Response
from flask_cors import CORS
import csv
import io
import logging
import os
from dataclasses import asdict

import config
from separator.inputs import CalculatorInputs
from separator.calculations import perform_enhanced_calculation
from separator.optimizer import optimize_for_target_efficiency
from separator.validation import VALIDATION_TOOLS, export_rows
from separator.tramp import (
    InvalidGeometryError, TrampGeometry, TrampExtractionInput,
    calculate_margin_ratio_from_force, calculate_margin_ratio_from_gauss,
    calculate_required_force_factor, evaluate_pickup_from_magnet,
)
from separator.field_decay import MagnetGeometry, force_factor_at_gap, magnetic_field_values, parse_model_name
from separator.catalog import (
    TRAMP_OBJECTS, load_catalog, find_unit, recommend_units, gauss_table,
    magnet_models, filter_by_belt_width, compare_model, classify_margin,
)

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app, resources={
    r"/api/*": {
        "origins": config.CORS_ORIGINS,
        "methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["Content-Type", "Cache-Control"],
        "expose_headers": ["Content-Type"]
    }
})

# Catalog rows are read once and never modified
if os.path.exists(config.CATALOG_FILE):
    app.config['CATALOG'] = load_catalog(config.CATALOG_FILE)
else:
    logger.warning("Catalog file not found at %s", config.CATALOG_FILE)
    app.config['CATALOG'] = []


def _catalog():
    return app.config['CATALOG']


def _json_body():
    return request.get_json(silent=True)


def _invalid(error):
    return jsonify({'error': str(error), 'status': 'Invalid'}), 400


@app.route('/api/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'catalog_units': len(_catalog())})


@app.route('/api/calculate', methods=['POST'])
def calculate():
    """Run the full separator calculation with validation"""
    data = _json_body()
    if data is None:
        return jsonify({'error': 'No JSON body provided'}), 400

    try:
        inputs = CalculatorInputs.from_dict(data.get('inputs', data))
        results = perform_enhanced_calculation(
            inputs,
            optimize=bool(data.get('optimize', False)),
            target_efficiency=float(data.get('target_efficiency', config.DEFAULT_TARGET_EFFICIENCY)),
            max_iterations=int(data.get('max_iterations', config.DEFAULT_MAX_ITERATIONS)),
        )
        logger.info("Calculation: model=%s, severity=%s",
                    results.recommended_model.model, results.validation.severity)
        return jsonify({'success': True, 'results': asdict(results)})
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Calculation failed")
        return jsonify({'error': str(e)}), 500


@app.route('/api/optimize', methods=['POST'])
def optimize():
    """Search gap, core:belt ratio, belt speed and feed depth for a target efficiency"""
    data = _json_body()
    if data is None:
        return jsonify({'error': 'No JSON body provided'}), 400

    try:
        inputs = CalculatorInputs.from_dict(data.get('inputs', data))
        result = optimize_for_target_efficiency(
            inputs,
            target_efficiency=float(data.get('target_efficiency', config.DEFAULT_TARGET_EFFICIENCY)),
            max_iterations=int(data.get('max_iterations', config.DEFAULT_MAX_ITERATIONS)),
        )
        return jsonify({'success': True, 'optimization': result.to_dict()})
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Optimization failed")
        return jsonify({'error': str(e)}), 500


@app.route('/api/export', methods=['POST'])
def export_csv():
    """Validated design export as CSV"""
    data = _json_body()
    if data is None:
        return jsonify({'error': 'No JSON body provided'}), 400

    try:
        inputs = CalculatorInputs.from_dict(data.get('inputs', data))
        results = perform_enhanced_calculation(inputs)
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerows(export_rows(results, results.validation))
    response = Response(buffer.getvalue(), mimetype='text/csv')
    response.headers['Content-Disposition'] = 'attachment; filename=magnetic-separator-design-validated.csv'
    return response


@app.route('/api/tramp_pickup', methods=['POST'])
def tramp_pickup():
    """Tramp pickup check from a surface Force Factor (default) or surface Gauss"""
    data = _json_body()
    if data is None:
        return jsonify({'error': 'No JSON body provided'}), 400

    method = data.get('method', 'force')
    orientation = data.get('orientation', config.DEFAULT_ORIENTATION)
    burden = data.get('burden', config.DEFAULT_BURDEN)
    backplate = data.get('backplate_mm')

    try:
        safety_factor = float(data.get('safety_factor', config.DEFAULT_SAFETY_FACTOR))
        gap = float(data.get('gap_mm', 0))
        backplate = float(backplate) if backplate is not None else None
        geometry = TrampGeometry.from_dict(data.get('geometry') or {})
        if method == 'gauss':
            result = calculate_margin_ratio_from_gauss(
                float(data.get('surface_gauss', 0)), gap, geometry,
                orientation=orientation, burden=burden,
                safety_factor=safety_factor, backplate_mm=backplate,
            )
        elif method == 'force':
            result = calculate_margin_ratio_from_force(
                float(data.get('surface_force_factor', 0)), gap, geometry,
                orientation=orientation, burden=burden,
                safety_factor=safety_factor, backplate_mm=backplate,
            )
        elif method == 'magnet':
            magnet = MagnetGeometry(
                core_mm=float(data.get('core_mm', 0)),
                backplate_mm=float(data.get('backplate_mm', 0)),
                grade=data.get('grade', 'A20'),
            )
            result = evaluate_pickup_from_magnet(
                magnet, gap, geometry,
                orientation=orientation, burden=burden, safety_factor=safety_factor,
            )
        else:
            return jsonify({'error': f"Unknown method: {method}"}), 400
    except InvalidGeometryError as e:
        return _invalid(e)
    except (TypeError, ValueError, AttributeError) as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'success': True, 'method': method, 'result': result.to_dict()})


@app.route('/api/tramp_extraction', methods=['POST'])
def tramp_extraction():
    """Heuristic required Force Factor, optionally compared with a model's FF at gap"""
    data = _json_body()
    if data is None:
        return jsonify({'error': 'No JSON body provided'}), 400

    try:
        extraction = TrampExtractionInput(
            width_mm=float(data['width_mm']),
            length_mm=float(data['length_mm']),
            height_mm=float(data['height_mm']),
            belt_speed_mps=float(data.get('belt_speed_mps', 1.5)),
            burden_mm=float(data.get('burden_mm', 0)),
            water_percent=float(data.get('water_percent', 0)),
            material=data.get('material', 'coal'),
            description=data.get('description', ''),
            part_type=data.get('part_type', 'generic'),
        )
        surface_ff = data.get('surface_force_factor')
        if surface_ff is not None:
            surface_ff = float(surface_ff)
            gap = float(data.get('gap_mm', 0))
    except KeyError as e:
        return jsonify({'error': f"Missing field: {e.args[0]}"}), 400
    except (TypeError, ValueError, AttributeError) as e:
        return jsonify({'error': str(e)}), 400

    result = calculate_required_force_factor(extraction)
    payload = {'success': True, 'result': result.to_dict()}

    if surface_ff is not None:
        ff_at_gap = float(force_factor_at_gap(surface_ff, gap))
        payload['force_factor_at_gap'] = ff_at_gap
        payload['extraction_ratio'] = ff_at_gap / result.required_force_factor
    return jsonify(payload)


@app.route('/api/magnet_field', methods=['POST'])
def magnet_field():
    """Surface and at-gap field values from magnet geometry or a model name"""
    data = _json_body()
    if data is None:
        return jsonify({'error': 'No JSON body provided'}), 400

    if data.get('model'):
        parsed = parse_model_name(str(data['model']))
        if parsed is None:
            return jsonify({'error': f"Could not parse model name: {data['model']}"}), 400
        core, backplate = parsed
    else:
        core = data.get('core_mm', 0)
        backplate = data.get('backplate_mm', 0)

    try:
        magnet = MagnetGeometry(core_mm=float(core), backplate_mm=float(backplate), grade=data.get('grade', 'A20'))
        values = magnetic_field_values(magnet, float(data.get('gap_mm', 0)))
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'success': True, 'magnet': asdict(magnet), 'values': values.to_dict()})


@app.route('/api/catalog', methods=['GET'])
def get_catalog():
    return jsonify([unit.to_dict() for unit in _catalog()])


@app.route('/api/catalog/recommendations', methods=['GET'])
def catalog_recommendations():
    """Catalog units matching a belt width and core:belt ratio"""
    try:
        belt_width = float(request.args['belt_width'])
        ratio = float(request.args['core_belt_ratio'])
        min_gauss = float(request.args.get('min_gauss', 0))
        min_force = float(request.args.get('min_force', 0))
    except KeyError as e:
        return jsonify({'error': f"Missing parameter: {e.args[0]}"}), 400
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    units = recommend_units(_catalog(), belt_width, ratio, min_gauss, min_force)
    return jsonify({'count': len(units), 'units': [u.to_dict() for u in units]})


@app.route('/api/gauss_table/<int:prefix>/<int:suffix>', methods=['GET'])
def get_gauss_table(prefix, suffix):
    unit = find_unit(_catalog(), prefix, suffix)
    if unit is None:
        return jsonify({'error': 'Unit not found'}), 404
    rows = gauss_table(unit, max_gap=config.GAUSS_TABLE_MAX_GAP, step=config.GAUSS_TABLE_STEP)
    return jsonify({'model': unit.model_name, 'rows': rows})


@app.route('/api/magnet_models', methods=['GET'])
def get_magnet_models():
    models = magnet_models(_catalog())
    model_name = request.args.get('model')
    if model_name:
        model = next((m for m in models if m['name'] == model_name), None)
        if model is None:
            return jsonify({'error': 'Model not found'}), 404
        return jsonify({'model': model, 'tramps': TRAMP_OBJECTS})
    return jsonify({'models': models, 'tramps': TRAMP_OBJECTS})


@app.route('/api/compare/<int:prefix>/<int:suffix>', methods=['POST'])
def compare(prefix, suffix):
    """Gap sweep of a catalog unit against the worst of several tramp items"""
    unit = find_unit(_catalog(), prefix, suffix)
    if unit is None:
        return jsonify({'error': 'Unit not found'}), 404
    data = request.get_json(silent=True) or {}

    try:
        items = [
            {'geometry': TrampGeometry.from_dict(item), 'orientation': item.get('orientation', 'flat')}
            for item in data.get('tramp_items', [{'shape': 'bar', 'width_mm': 50, 'length_mm': 100, 'thickness_mm': 10}])
        ]
        safety_factor = float(data.get('safety_factor', config.DEFAULT_SAFETY_FACTOR))
        ambient = int(data.get('ambient', config.DEFAULT_AMBIENT_CLASS))
        points = compare_model(
            unit, items,
            burden=data.get('burden', config.DEFAULT_BURDEN),
            safety_factor=safety_factor,
            ambient=ambient,
            belt_speed=float(data.get('belt_speed', 2.0)),
            burden_depth=float(data.get('burden_depth', 100.0)),
            max_gap=config.COMPARISON_MAX_GAP,
        )
        belt_width = data.get('belt_width')
        belt_width = float(belt_width) if belt_width is not None else None
        gap = data.get('gap_mm')
        gap = float(gap) if gap is not None else None
    except InvalidGeometryError as e:
        return _invalid(e)
    except (TypeError, ValueError, AttributeError) as e:
        return jsonify({'error': str(e)}), 400

    payload = {'model': unit.model_name, 'points': points}
    if belt_width is not None:
        payload['in_belt_range'] = unit in filter_by_belt_width([unit], belt_width)
    if gap is not None:
        current = next((p for p in points if p['gap'] == gap), None)
        if current is not None:
            payload['current'] = dict(current, **classify_margin(current['required_force'], current['model_force']))
    return jsonify(payload)


@app.route('/api/validation_tools', methods=['GET'])
def validation_tools():
    return jsonify(VALIDATION_TOOLS)


if __name__ == '__main__':
    app.run(debug=config.DEBUG, host=config.HOST, port=config.PORT)
