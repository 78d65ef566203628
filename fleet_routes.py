"""
Fleet Routes Blueprint for the equipment cost calculator.

Thin JSON layer over the FleetStore held in ``current_app.extensions``:
- Equipment CRUD, duplicate and retire
- Filtered/sorted listing, fleet stats and insights
- Cost preview and form validation
- Export / import of the equipment directory
- Form draft and preferences
"""

from flask import Blueprint, Response, current_app, jsonify, request
import logging

from constants import (
    EQUIPMENT_CATEGORIES, MAINTENANCE_PRESETS, USAGE_PRESETS, VALID_STATUSES,
    SORT_FIELDS, SORT_ORDERS,
)
from cost_model import compute_all
from fleet_insights import (
    equipment_by_category, equipment_needing_attention, equipment_with_metrics,
    recent_equipment,
)
from validation import quality_alerts, validate_form

logger = logging.getLogger(__name__)

fleet_bp = Blueprint('fleet_bp', __name__)

_FILTER_ARGS = ('category', 'search', 'sortBy', 'sortOrder')


def _store():
    return current_app.extensions['fleet_store']


def _storage_error(action):
    return jsonify({'error': f'Could not {action}: storage write failed'}), 500


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

@fleet_bp.route('/api/equipment/constants', methods=['GET'])
def get_constants():
    return jsonify({
        'categories': EQUIPMENT_CATEGORIES,
        'maintenancePresets': MAINTENANCE_PRESETS,
        'usagePresets': USAGE_PRESETS,
        'statuses': VALID_STATUSES,
        'sortFields': SORT_FIELDS,
        'sortOrders': SORT_ORDERS,
    })


# ---------------------------------------------------------------------------
# Listing and queries
# ---------------------------------------------------------------------------

@fleet_bp.route('/api/equipment', methods=['GET'])
def list_equipment():
    store = _store()
    criteria = {key: request.args[key] for key in _FILTER_ARGS if key in request.args}
    if criteria:
        store.set_filter(criteria)
    return jsonify({'equipment': store.derived_view, 'filters': store.filters})


@fleet_bp.route('/api/equipment/stats', methods=['GET'])
def get_stats():
    return jsonify(_store().stats())


@fleet_bp.route('/api/equipment/insights', methods=['GET'])
def get_insights():
    equipment = _store().equipment
    limit = request.args.get('limit', 5, type=int)
    return jsonify({
        'byCategory': equipment_by_category(equipment),
        'recent': recent_equipment(equipment, limit=limit),
        'needingAttention': equipment_needing_attention(equipment),
    })


@fleet_bp.route('/api/equipment/<equipment_id>', methods=['GET'])
def get_equipment(equipment_id):
    record = _store().get_by_id(equipment_id)
    if record is None:
        return jsonify({'error': 'Equipment not found'}), 404
    return jsonify(equipment_with_metrics(record))


# ---------------------------------------------------------------------------
# Preview and validation (nothing is saved)
# ---------------------------------------------------------------------------

@fleet_bp.route('/api/equipment/preview', methods=['POST'])
def preview_costs():
    data = request.get_json(force=True, silent=True) or {}
    calculated = compute_all(data)
    return jsonify({'calculated': calculated, 'alerts': quality_alerts(calculated, data)})


@fleet_bp.route('/api/equipment/validate', methods=['POST'])
def validate_equipment():
    data = request.get_json(force=True, silent=True) or {}
    return jsonify(validate_form(data))


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

@fleet_bp.route('/api/equipment', methods=['POST'])
def create_equipment():
    data = request.get_json(force=True, silent=True) or {}
    result = validate_form(data)
    if not result['isValid']:
        return jsonify({'error': 'Validation failed', 'errors': result['errors']}), 400

    record = _store().add(data)
    if record is None:
        return _storage_error('add equipment')
    return jsonify({
        'equipment': record,
        'alerts': quality_alerts(record['calculated'], record),
    }), 201


@fleet_bp.route('/api/equipment/<equipment_id>', methods=['PUT'])
def update_equipment(equipment_id):
    store = _store()
    data = request.get_json(force=True, silent=True) or {}
    if store.gateway.get_by_id(equipment_id) is None:
        return jsonify({'error': 'Equipment not found'}), 404

    record = store.update(equipment_id, data)
    if record is None:
        return _storage_error('update equipment')
    return jsonify({
        'equipment': record,
        'alerts': quality_alerts(record['calculated'], record),
    })


@fleet_bp.route('/api/equipment/<equipment_id>', methods=['DELETE'])
def delete_equipment(equipment_id):
    if not _store().remove(equipment_id):
        return _storage_error('delete equipment')
    return jsonify({'deleted': equipment_id})


@fleet_bp.route('/api/equipment/<equipment_id>/duplicate', methods=['POST'])
def duplicate_equipment(equipment_id):
    store = _store()
    if store.get_by_id(equipment_id) is None:
        return jsonify({'error': 'Equipment not found'}), 404
    record = store.duplicate(equipment_id)
    if record is None:
        return _storage_error('duplicate equipment')
    return jsonify(record), 201


@fleet_bp.route('/api/equipment/<equipment_id>/retire', methods=['POST'])
def retire_equipment(equipment_id):
    store = _store()
    if store.gateway.get_by_id(equipment_id) is None:
        return jsonify({'error': 'Equipment not found'}), 404
    record = store.retire(equipment_id)
    if record is None:
        return _storage_error('retire equipment')
    return jsonify(record)


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------

@fleet_bp.route('/api/equipment/export', methods=['GET'])
def export_equipment():
    snapshot = _store().export_snapshot()
    return Response(
        snapshot['payload'],
        mimetype='application/json',
        headers={'Content-Disposition': f"attachment; filename={snapshot['suggestedFilename']}"},
    )


@fleet_bp.route('/api/equipment/import', methods=['POST'])
def import_equipment():
    store = _store()
    upload = request.files.get('file')
    payload = upload.read() if upload else request.get_data()
    document = store.gateway.parse_snapshot(payload)
    if document is None:
        return jsonify({'error': 'Invalid import data format'}), 400

    before = len(store.equipment)
    merged = store.import_snapshot(document)
    if merged is None:
        return _storage_error('import equipment')
    return jsonify({'imported': len(merged) - before, 'total': len(merged)})


# ---------------------------------------------------------------------------
# Draft and preferences
# ---------------------------------------------------------------------------

@fleet_bp.route('/api/equipment/draft', methods=['GET'])
def get_draft():
    return jsonify({'draft': _store().gateway.load_draft()})


@fleet_bp.route('/api/equipment/draft', methods=['PUT'])
def save_draft():
    data = request.get_json(force=True, silent=True) or {}
    if not _store().gateway.save_draft(data):
        return _storage_error('save draft')
    return jsonify({'saved': True})


@fleet_bp.route('/api/equipment/draft', methods=['DELETE'])
def clear_draft():
    if not _store().gateway.clear_draft():
        return _storage_error('clear draft')
    return jsonify({'cleared': True})


@fleet_bp.route('/api/preferences', methods=['GET'])
def get_preferences():
    return jsonify(_store().gateway.load_preferences())


@fleet_bp.route('/api/preferences', methods=['PUT'])
def update_preferences():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Preferences must be a JSON object'}), 400
    gateway = _store().gateway
    preferences = gateway.load_preferences()
    for key, value in data.items():
        preferences = gateway.update_preference(key, value)
        if preferences is None:
            return _storage_error('save preferences')
    return jsonify(preferences)
