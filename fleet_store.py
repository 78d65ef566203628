"""
Fleet state for the equipment cost calculator.

FleetStore owns the in-memory equipment collection, the active
filter/search/sort criteria, and the derived view computed from the two.
Every mutation goes through the storage gateway first; in-memory state only
changes after the durable write succeeds. Costs under ``calculated`` are
recomputed on every add, update and import.

Usage:
    store = FleetStore(StorageGateway())
    store.load()
    record = store.add({'identity': {...}, 'usage': {...}, 'financial': {...}})
    store.set_search('cat')
    store.derived_view
"""

import copy
import logging
import uuid
from datetime import datetime, timezone

from constants import ALL_CATEGORIES, DEFAULT_FILTERS, VALID_STATUSES
from cost_model import apply_resale, compute_all, round2, section, to_number
from storage import StorageGateway, utc_now_iso

logger = logging.getLogger(__name__)

EDITABLE_SECTIONS = ('identity', 'usage', 'financial')
RESERVED_KEYS = ('id', 'calculated', 'metadata') + EDITABLE_SECTIONS


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------

def display_name(record):
    identity = section(record, 'identity')
    return str(identity.get('equipmentName') or identity.get('name') or '')


def parse_timestamp(value):
    """ISO-8601 string to epoch seconds; unparseable or missing is 0."""
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def new_metadata(now=None):
    now = now or utc_now_iso()
    return {
        'dateAdded': now,
        'lastModified': now,
        'status': 'active',
        'usageHours': 0,
        'utilization': 0,
    }


def prepare_record(record):
    """Return a copy of record with resale and costs recomputed.

    Missing metadata fields are filled in; existing ones are kept.
    """
    prepared = copy.deepcopy(record)
    prepared['financial'] = apply_resale(section(prepared, 'financial'))
    prepared['calculated'] = compute_all(prepared)
    metadata = new_metadata()
    metadata.update(section(prepared, 'metadata'))
    if metadata.get('status') not in VALID_STATUSES:
        metadata['status'] = 'active'
    prepared['metadata'] = metadata
    return prepared


# ---------------------------------------------------------------------------
# Derived view and aggregates
# ---------------------------------------------------------------------------

_SORT_KEYS = {
    'name': display_name,
    'cost': lambda r: to_number((r.get('calculated') or {}).get('hourlyCost')),
    'date': lambda r: parse_timestamp((r.get('metadata') or {}).get('dateAdded')),
    'category': lambda r: str(section(r, 'identity').get('category') or ''),
}


def _matches_search(record, search_lower):
    identity = section(record, 'identity')
    fields = (display_name(record), identity.get('make'), identity.get('model'))
    return any(search_lower in str(value).lower() for value in fields if value)


def filter_and_sort(equipment, filters):
    """Project the collection through category, search and sort criteria.

    Sorting is stable; ``sortOrder == 'desc'`` reverses the comparison. An
    unknown ``sortBy`` leaves the filtered order untouched.
    """
    result = list(equipment)

    category = filters.get('category')
    if category and category != ALL_CATEGORIES:
        result = [r for r in result if section(r, 'identity').get('category') == category]

    search = filters.get('search')
    if search:
        search_lower = str(search).lower()
        result = [r for r in result if _matches_search(r, search_lower)]

    sort_key = _SORT_KEYS.get(filters.get('sortBy'))
    if sort_key:
        result.sort(key=sort_key, reverse=filters.get('sortOrder') == 'desc')

    return result


def fleet_stats(equipment):
    """Count, value, average hourly cost and active count for a collection."""
    total_count = len(equipment)
    total_value = sum(to_number((r.get('financial') or {}).get('purchasePrice')) for r in equipment)
    total_hourly = sum(to_number((r.get('calculated') or {}).get('hourlyCost')) for r in equipment)
    return {
        'totalCount': total_count,
        'totalValue': total_value,
        'averageHourlyCost': round2(total_hourly / total_count) if total_count else 0,
        'activeCount': sum(1 for r in equipment if (r.get('metadata') or {}).get('status') == 'active'),
    }


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class FleetStore:
    """Single source of truth for the fleet and its filtered view."""

    def __init__(self, gateway=None):
        self.gateway = gateway if gateway is not None else StorageGateway()
        self.equipment = []
        self.filters = dict(DEFAULT_FILTERS)
        self.derived_view = []

    def _refresh(self):
        self.derived_view = filter_and_sort(self.equipment, self.filters)

    # -- loading -----------------------------------------------------------

    def load(self):
        """Replace the in-memory collection with the stored snapshot."""
        self.equipment = self.gateway.read_all()
        self._refresh()
        logger.info(f"Fleet loaded: count={len(self.equipment)}")
        return self.equipment

    # -- mutations ---------------------------------------------------------

    def add(self, input_record):
        """Create a record with a fresh id, costs and metadata.

        Returns:
            dict or None: the stored record, or None if the durable write
            failed (in-memory state is then unchanged).
        """
        record = copy.deepcopy(input_record) if isinstance(input_record, dict) else {}
        record['id'] = str(uuid.uuid4())
        for name in EDITABLE_SECTIONS:
            record[name] = dict(section(record, name))
        record['financial'] = apply_resale(record['financial'])
        record['calculated'] = compute_all(record)
        record['metadata'] = new_metadata()

        if not self.gateway.append(record):
            logger.error(f"Equipment add failed: name={display_name(record)!r}")
            return None

        self.equipment = self.equipment + [record]
        self._refresh()
        logger.info(f"Equipment added: id={record['id']} name={display_name(record)!r}")
        return record

    def update(self, equipment_id, input_record):
        """Apply changes to a stored record and recompute its costs.

        ``identity``, ``usage``, ``financial`` and ``metadata`` in the input
        are merged field by field over the stored record. ``id`` and
        ``dateAdded`` never change; ``lastModified`` is always refreshed.

        Returns:
            dict or None: the updated record, or None if the id is not
            stored or the durable write failed.
        """
        existing = self.gateway.get_by_id(equipment_id)
        if existing is None:
            logger.warning(f"Equipment update failed: id={equipment_id} not found")
            return None

        changes = input_record if isinstance(input_record, dict) else {}
        updated = copy.deepcopy(existing)
        for key, value in changes.items():
            if key not in RESERVED_KEYS:
                updated[key] = copy.deepcopy(value)
        for name in EDITABLE_SECTIONS:
            merged = dict(section(updated, name))
            merged.update(section(changes, name))
            updated[name] = merged

        updated['id'] = equipment_id
        updated['financial'] = apply_resale(updated['financial'])
        updated['calculated'] = compute_all(updated)

        metadata = dict(section(updated, 'metadata'))
        previous_status = metadata.get('status', 'active')
        for key, value in section(changes, 'metadata').items():
            if key not in ('dateAdded', 'lastModified'):
                metadata[key] = value
        if metadata.get('status') not in VALID_STATUSES:
            metadata['status'] = previous_status if previous_status in VALID_STATUSES else 'active'
        metadata['lastModified'] = utc_now_iso()
        updated['metadata'] = metadata

        if not self.gateway.replace(equipment_id, updated):
            logger.error(f"Equipment update failed: id={equipment_id} could not be saved")
            return None

        if any(item.get('id') == equipment_id for item in self.equipment):
            self.equipment = [updated if item.get('id') == equipment_id else item
                              for item in self.equipment]
        else:
            self.equipment = self.equipment + [updated]
        self._refresh()
        logger.info(f"Equipment updated: id={equipment_id}")
        return updated

    def remove(self, equipment_id):
        """Delete a record. Removing an unknown id succeeds without change.

        Returns:
            bool: False only if the durable write failed.
        """
        if not self.gateway.remove_by_id(equipment_id):
            logger.error(f"Equipment delete failed: id={equipment_id}")
            return False
        self.equipment = [item for item in self.equipment if item.get('id') != equipment_id]
        self._refresh()
        logger.info(f"Equipment deleted: id={equipment_id}")
        return True

    def retire(self, equipment_id):
        return self.update(equipment_id, {'metadata': {'status': 'retired'}})

    def duplicate(self, equipment_id):
        """Add a copy of a record under a new id, named '<name> (Copy)'."""
        original = self.get_by_id(equipment_id)
        if original is None:
            return None
        clone = {key: copy.deepcopy(value) for key, value in original.items()
                 if key not in ('id', 'metadata', 'calculated')}
        identity = clone.setdefault('identity', {})
        identity['equipmentName'] = f"{display_name(original)} (Copy)"
        identity.pop('name', None)
        return self.add(clone)

    # -- import / export ---------------------------------------------------

    def export_snapshot(self):
        return self.gateway.export_snapshot()

    def import_snapshot(self, payload):
        """Merge an export document; existing ids win.

        Returns:
            list[dict] or None: the merged collection, or None if the
            document was rejected or could not be saved.
        """
        merged = self.gateway.import_snapshot(payload, prepare=prepare_record)
        if merged is None:
            return None
        self.equipment = merged
        self._refresh()
        return merged

    # -- view criteria -----------------------------------------------------

    def set_filter(self, partial):
        filters = dict(self.filters)
        filters.update(partial or {})
        self.filters = filters
        self._refresh()
        return self.derived_view

    def set_search(self, text):
        return self.set_filter({'search': text or ''})

    def set_sort(self, sort_by, sort_order='asc'):
        return self.set_filter({'sortBy': sort_by, 'sortOrder': sort_order})

    # -- queries -----------------------------------------------------------

    def get_by_id(self, equipment_id):
        for item in self.equipment:
            if item.get('id') == equipment_id:
                return item
        return None

    def stats(self):
        return fleet_stats(self.equipment)
