"""
Persistence gateway for the equipment directory.

The whole fleet lives in one JSON blob under a fixed key in the sqlite
``kv_store`` table, alongside the in-progress form draft and the app
preferences. Reads never fail: a missing or corrupt blob reads as empty.
Writes report success with a bool and never raise for storage errors.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from db import get_db, init_kv_table
from constants import (
    STORAGE_KEY, DRAFT_KEY, PREFERENCES_KEY, DEFAULT_PREFERENCES,
    EXPORT_VERSION, EXPORT_FILENAME_PREFIX,
)

logger = logging.getLogger(__name__)

RECORD_SECTIONS = ('identity', 'usage', 'financial', 'calculated', 'metadata')


def utc_now_iso():
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class StorageGateway:
    """Durable read/write of the fleet collection plus import/export."""

    def __init__(self, db_path=None, key=STORAGE_KEY):
        self.db_path = db_path
        self.key = key
        init_kv_table(db_path)

    # -----------------------------------------------------------------------
    # Raw blob access
    # -----------------------------------------------------------------------

    def _read_blob(self, key):
        """Return the decoded blob for key, or None if absent or corrupt."""
        try:
            with get_db(self.db_path) as conn:
                row = conn.execute('SELECT value FROM kv_store WHERE key = ?', (key,)).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to read '{key}' from storage: {e}")
            return None
        if row is None or row['value'] is None:
            return None
        try:
            return json.loads(row['value'])
        except ValueError as e:
            logger.warning(f"Corrupt payload under '{key}', treating as empty: {e}")
            return None

    def _write_blob(self, key, value):
        try:
            payload = json.dumps(value)
            with get_db(self.db_path) as conn:
                conn.execute(
                    'INSERT OR REPLACE INTO kv_store (key, value, updated_at) '
                    'VALUES (?, ?, CURRENT_TIMESTAMP)',
                    (key, payload)
                )
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Failed to save '{key}' to storage: {e}")
            return False
        return True

    def _delete_blob(self, key):
        try:
            with get_db(self.db_path) as conn:
                conn.execute('DELETE FROM kv_store WHERE key = ?', (key,))
        except sqlite3.Error as e:
            logger.error(f"Failed to clear '{key}' from storage: {e}")
            return False
        return True

    # -----------------------------------------------------------------------
    # Fleet collection
    # -----------------------------------------------------------------------

    def read_all(self):
        """Load every equipment record. Returns [] when nothing usable is stored."""
        equipment = self._read_blob(self.key)
        if equipment is None:
            return []
        if not isinstance(equipment, list):
            logger.warning(f"Stored equipment under '{self.key}' is not a list, treating as empty")
            return []
        if not all(isinstance(item, dict) for item in equipment):
            logger.warning(f"Stored equipment under '{self.key}' has non-object entries, treating as empty")
            return []
        return equipment

    def write_all(self, equipment):
        """Overwrite the stored collection in a single blob write.

        Returns:
            bool: True if the write committed.
        """
        equipment = list(equipment)
        saved = self._write_blob(self.key, equipment)
        if saved:
            logger.debug(f"Equipment saved: count={len(equipment)}")
        return saved

    def get_by_id(self, equipment_id):
        for item in self.read_all():
            if item.get('id') == equipment_id:
                return item
        return None

    def append(self, record):
        """Append a record. Fails if its id is already stored.

        Returns:
            bool: True if the record was written.
        """
        equipment = self.read_all()
        if any(item.get('id') == record.get('id') for item in equipment):
            logger.warning(f"Append refused: equipment id={record.get('id')} already exists")
            return False
        equipment.append(record)
        return self.write_all(equipment)

    def replace(self, equipment_id, record):
        """Replace the stored record with the given id.

        Returns:
            bool: False if the id is not stored or the write failed.
        """
        equipment = self.read_all()
        for index, item in enumerate(equipment):
            if item.get('id') == equipment_id:
                equipment[index] = record
                return self.write_all(equipment)
        logger.warning(f"Replace refused: equipment id={equipment_id} not found")
        return False

    def remove_by_id(self, equipment_id):
        """Delete by id. An absent id is a successful no-op."""
        equipment = self.read_all()
        remaining = [item for item in equipment if item.get('id') != equipment_id]
        if len(remaining) == len(equipment):
            return True
        return self.write_all(remaining)

    # -----------------------------------------------------------------------
    # Import / export
    # -----------------------------------------------------------------------

    def export_snapshot(self):
        """Serialize the full collection as an export document.

        Returns:
            dict: ``payload`` (JSON text), ``suggestedFilename`` and the
            decoded ``data``.
        """
        export_date = utc_now_iso()
        data = {
            'equipment': self.read_all(),
            'exportDate': export_date,
            'version': EXPORT_VERSION,
        }
        filename = f"{EXPORT_FILENAME_PREFIX}-{export_date.split('T')[0]}.json"
        logger.info(f"Equipment exported: count={len(data['equipment'])} file={filename}")
        return {
            'payload': json.dumps(data, indent=2),
            'suggestedFilename': filename,
            'data': data,
        }

    def parse_snapshot(self, payload):
        """Decode and shape-check an export document without touching storage.

        Every entry in ``equipment`` must be an object whose ``id``, when
        present, is a string or integer and whose ``identity``, ``usage``,
        ``financial``, ``calculated`` and ``metadata`` sections, when present,
        are objects.

        Args:
            payload: JSON text, bytes, or an already-decoded dict.

        Returns:
            dict or None: the decoded document, or None if it is rejected.
        """
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes, bytearray)) else payload
        except ValueError as e:
            logger.error(f"Import rejected, payload is not valid JSON: {e}")
            return None

        if not isinstance(data, dict) or not isinstance(data.get('equipment'), list):
            logger.error("Import rejected: missing 'equipment' list")
            return None
        for item in data['equipment']:
            if not isinstance(item, dict):
                logger.error("Import rejected: 'equipment' contains non-object entries")
                return None
            equipment_id = item.get('id')
            if equipment_id is not None and (
                    isinstance(equipment_id, bool) or not isinstance(equipment_id, (str, int))):
                logger.error(f"Import rejected: invalid equipment id {equipment_id!r}")
                return None
            for name in RECORD_SECTIONS:
                if name in item and not isinstance(item[name], dict):
                    logger.error(f"Import rejected: '{name}' of equipment id={equipment_id} is not an object")
                    return None
        return data

    def import_snapshot(self, payload, prepare=None):
        """Merge an export document into the stored collection.

        Records whose id is already stored are dropped; existing records are
        never overwritten. The document is rejected as a whole when
        parse_snapshot() rejects it.

        Args:
            payload: JSON text, bytes, or an already-decoded dict.
            prepare: optional callable applied to each newly added record
                before it is written.

        Returns:
            list[dict] or None: the merged collection, or None on failure.
        """
        data = self.parse_snapshot(payload)
        if data is None:
            return None

        existing = self.read_all()
        seen_ids = {item.get('id') for item in existing if isinstance(item.get('id'), (str, int))}
        added = []
        for item in data['equipment']:
            item = dict(item)
            if not item.get('id'):
                item['id'] = str(uuid.uuid4())
            if item['id'] in seen_ids:
                continue
            seen_ids.add(item['id'])
            added.append(prepare(item) if prepare else item)

        merged = existing + added
        if not self.write_all(merged):
            return None
        logger.info(
            f"Equipment imported: added={len(added)} "
            f"skipped={len(data['equipment']) - len(added)} total={len(merged)}"
        )
        return merged

    # -----------------------------------------------------------------------
    # Form draft
    # -----------------------------------------------------------------------

    def save_draft(self, draft):
        stamped = dict(draft) if isinstance(draft, dict) else {}
        stamped['savedAt'] = utc_now_iso()
        return self._write_blob(DRAFT_KEY, stamped)

    def load_draft(self):
        draft = self._read_blob(DRAFT_KEY)
        return draft if isinstance(draft, dict) else None

    def clear_draft(self):
        return self._delete_blob(DRAFT_KEY)

    # -----------------------------------------------------------------------
    # Preferences
    # -----------------------------------------------------------------------

    def load_preferences(self):
        """Stored preferences layered over DEFAULT_PREFERENCES."""
        preferences = dict(DEFAULT_PREFERENCES)
        stored = self._read_blob(PREFERENCES_KEY)
        if isinstance(stored, dict):
            preferences.update(stored)
        return preferences

    def update_preference(self, key, value):
        """Set one preference. Returns the updated preferences, or None on failure."""
        preferences = self.load_preferences()
        preferences[key] = value
        if not self._write_blob(PREFERENCES_KEY, preferences):
            return None
        return preferences
