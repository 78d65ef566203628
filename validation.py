"""
Input validation and cost quality alerts for equipment records.

Both checks are advisory. validate_form() reports per-field problems with a
raw form submission; quality_alerts() flags cost figures that look
implausible. Neither raises, neither mutates its input, and neither blocks a
save: the cost model still produces numbers for any input.
"""

import logging
import math

from constants import (
    VALIDATION_LIMITS, QUALITY_THRESHOLDS, MAINTENANCE_COSTS,
    CUSTOM_MAINTENANCE_LEVEL,
)
from cost_model import annual_hours, section, to_number

logger = logging.getLogger(__name__)


def _parse_number(value):
    """Return a float for numeric-looking input, None otherwise."""
    if value is None or isinstance(value, (bool, list, dict)):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def _money(amount):
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,}"


# ---------------------------------------------------------------------------
# Field validators: each returns an error message or None
# ---------------------------------------------------------------------------

def validate_required(value, field_name):
    if value is None or str(value).strip() == '':
        return f"{field_name} is required"
    return None


def validate_year(year):
    year_num = _parse_number(year)
    if not year_num:
        return 'Valid year is required'
    limits = VALIDATION_LIMITS['year']
    if year_num < limits['min'] or year_num > limits['max']:
        return f"Year must be between {limits['min']} and {limits['max']}"
    return None


def validate_currency(amount, field_name, minimum=0, maximum=math.inf):
    amount_num = _parse_number(amount)
    if amount_num is None or amount_num < 0:
        return f"{field_name} must be a valid positive number"
    if amount_num < minimum:
        return f"{field_name} must be at least {_money(minimum)}"
    if amount_num > maximum:
        return f"{field_name} must be less than {_money(maximum)}"
    return None


def validate_range(value, label, limits):
    number = _parse_number(value)
    if not number or number < limits['min'] or number > limits['max']:
        return f"{label} must be between {limits['min']} and {limits['max']}"
    return None


def validate_days_per_year(days):
    return validate_range(days, 'Days per year', VALIDATION_LIMITS['daysPerYear'])


def validate_hours_per_day(hours):
    return validate_range(hours, 'Hours per day', VALIDATION_LIMITS['hoursPerDay'])


def validate_maintenance(level, custom_cost):
    """A preset level, or a positive custom cost, is required."""
    if level in MAINTENANCE_COSTS:
        return None
    custom = _parse_number(custom_cost)
    if custom is not None and custom > 0:
        return None
    if level == CUSTOM_MAINTENANCE_LEVEL:
        return 'Custom maintenance cost must be greater than $0'
    return 'Maintenance level is required'


# ---------------------------------------------------------------------------
# Form validation
# ---------------------------------------------------------------------------

def validate_form(record):
    """Validate a raw equipment form submission.

    Args:
        record: dict with optional ``identity``, ``usage`` and ``financial``
            sub-dicts.

    Returns:
        dict: ``{'isValid': bool, 'errors': {field_name: message}}``.
        ``isValid`` is True exactly when ``errors`` is empty.
    """
    identity = section(record, 'identity')
    usage = section(record, 'usage')
    financial = section(record, 'financial')
    errors = {}

    checks = [
        ('equipmentName', validate_required(identity.get('equipmentName'), 'Equipment Name')),
        ('year', validate_year(identity.get('year'))),
        ('make', validate_required(identity.get('make'), 'Make')),
        ('model', validate_required(identity.get('model'), 'Model')),
        ('category', validate_required(identity.get('category'), 'Category')),
        ('daysPerYear', validate_days_per_year(usage.get('daysPerYear'))),
        ('hoursPerDay', validate_hours_per_day(usage.get('hoursPerDay'))),
        ('purchasePrice', validate_currency(
            financial.get('purchasePrice'), 'Purchase Price',
            VALIDATION_LIMITS['purchasePrice']['min'],
            VALIDATION_LIMITS['purchasePrice']['max'],
        )),
    ]

    years_num = _parse_number(financial.get('yearsOfService'))
    if years_num:
        limits = VALIDATION_LIMITS['yearsOfService']
        if years_num < limits['min'] or years_num > limits['max']:
            checks.append((
                'yearsOfService',
                f"Years of service must be between {limits['min']} and {limits['max']}",
            ))

    checks.append(('dailyFuelCost', validate_currency(
        financial.get('dailyFuelCost'), 'Daily Fuel Cost',
        VALIDATION_LIMITS['dailyFuelCost']['min'],
        VALIDATION_LIMITS['dailyFuelCost']['max'],
    )))
    checks.append(('maintenanceLevel', validate_maintenance(
        financial.get('maintenanceLevel'), financial.get('customMaintenanceCost'),
    )))

    # Insurance is optional; an absent value counts as $0
    insurance = financial.get('annualInsuranceCost')
    if not (insurance is None or (isinstance(insurance, str) and not insurance.strip())):
        checks.append(('annualInsuranceCost', validate_currency(
            insurance, 'Insurance Cost',
            VALIDATION_LIMITS['annualInsuranceCost']['min'],
            VALIDATION_LIMITS['annualInsuranceCost']['max'],
        )))

    for field, message in checks:
        if message:
            errors[field] = message

    if errors:
        logger.debug(f"Equipment form invalid: {sorted(errors)}")
    return {'isValid': not errors, 'errors': errors}


# ---------------------------------------------------------------------------
# Quality alerts
# ---------------------------------------------------------------------------

def quality_alerts(calculated, record=None):
    """Heuristic checks over computed costs.

    Returns:
        list[dict]: ``{'type': 'warning'|'error'|'info', 'message': str}`` in
        check order: low hourly cost, high hourly cost, unprofitable rate,
        low utilization.
    """
    calculated = calculated if isinstance(calculated, dict) else {}
    alerts = []

    cost = to_number(calculated.get('hourlyCost'))
    rate = to_number(calculated.get('recommendedRate'))

    hours = calculated.get('annualHours')
    if hours is None:
        usage = section(record, 'usage')
        hours = annual_hours(usage.get('daysPerYear'), usage.get('hoursPerDay'))
    hours = to_number(hours)

    if cost < QUALITY_THRESHOLDS['hourlyCostLow']:
        alerts.append({'type': 'warning', 'message': 'Hourly cost seems low - verify inputs'})

    if cost > QUALITY_THRESHOLDS['hourlyCostHigh']:
        alerts.append({'type': 'warning', 'message': 'Hourly cost seems high - check fuel/maintenance'})

    if rate < QUALITY_THRESHOLDS['recommendedRateMinimum']:
        alerts.append({'type': 'error', 'message': 'Rate may be unprofitable'})

    if hours < QUALITY_THRESHOLDS['lowUtilizationHours']:
        alerts.append({'type': 'info', 'message': 'Low utilization - asset may be underused'})

    return alerts
