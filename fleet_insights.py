"""
Read-only fleet analytics built on top of stored equipment records.
Age and current-value metrics, per-category rollups, recent additions, and
equipment that needs attention.
"""

from datetime import datetime

from constants import ATTENTION_HOURLY_COST, ATTENTION_AGE_YEARS, ATTENTION_UTILIZATION
from cost_model import section, to_number
from fleet_store import parse_timestamp


def _age(record, current_year):
    year = to_number((record.get('identity') or {}).get('year')) or current_year
    return int(current_year - year)


def equipment_with_metrics(record, current_year=None):
    """Return a copy of record with an added ``metrics`` block."""
    if record is None:
        return None
    current_year = current_year or datetime.now().year
    age = _age(record, current_year)
    total_depreciation = to_number((record.get('calculated') or {}).get('annualDepreciation')) * age
    purchase_price = to_number((record.get('financial') or {}).get('purchasePrice'))

    enriched = dict(record)
    enriched['metrics'] = {
        'age': age,
        'currentValue': max(0, purchase_price - total_depreciation),
        'totalDepreciation': total_depreciation,
        'utilizationRate': to_number((record.get('metadata') or {}).get('utilization')),
    }
    return enriched


def equipment_by_category(equipment):
    """Group records by category with count, total value and average hourly cost."""
    groups = {}
    for record in equipment:
        category = str(section(record, 'identity').get('category') or 'Other')
        groups.setdefault(category, []).append(record)

    summary = {}
    for category, items in groups.items():
        summary[category] = {
            'items': items,
            'count': len(items),
            'totalValue': sum(to_number((r.get('financial') or {}).get('purchasePrice')) for r in items),
            'avgHourlyCost': sum(
                to_number((r.get('calculated') or {}).get('hourlyCost')) for r in items
            ) / len(items),
        }
    return summary


def recent_equipment(equipment, limit=5):
    """Newest additions first."""
    ordered = sorted(
        equipment,
        key=lambda r: parse_timestamp((r.get('metadata') or {}).get('dateAdded')),
        reverse=True,
    )
    return ordered[:limit]


def equipment_needing_attention(equipment, current_year=None):
    """Records with a high hourly cost, old age, or low utilization."""
    current_year = current_year or datetime.now().year
    flagged = []
    for record in equipment:
        cost = to_number((record.get('calculated') or {}).get('hourlyCost'))
        used = to_number((record.get('metadata') or {}).get('utilization'))
        if (cost > ATTENTION_HOURLY_COST
                or _age(record, current_year) > ATTENTION_AGE_YEARS
                or used < ATTENTION_UTILIZATION):
            flagged.append(record)
    return flagged
