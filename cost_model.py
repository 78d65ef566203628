"""
Equipment cost calculation engine.

Turns an equipment record's usage and financial inputs into the derived
annual and hourly cost figures stored under ``calculated``. Every function is
total: missing or non-numeric inputs coerce to 0 and the math proceeds, so a
nonsensical input yields a well-defined (if nonsensical) number rather than
an exception. Plausibility checks live in validation.py.
"""

import math

from constants import (
    MAINTENANCE_COSTS, DEFAULT_MAINTENANCE_LEVEL, CUSTOM_MAINTENANCE_LEVEL,
    DEFAULT_RESALE_PERCENTAGE, RECOMMENDED_MARKUP,
)


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def to_number(value):
    """Coerce a form value to a float, returning 0 for anything unusable."""
    if value is None or isinstance(value, (list, dict)):
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return number


def section(record, key):
    """The named sub-dict of a record, or {} when it is missing or not a dict."""
    if not isinstance(record, dict):
        return {}
    value = record.get(key)
    return value if isinstance(value, dict) else {}


def round_half_up(value):
    """Round to the nearest integer, .5 always going up."""
    return int(math.floor(value + 0.5))


def round2(value):
    """Round to 2 decimal places, .5 always going up."""
    return math.floor(value * 100 + 0.5) / 100


# ---------------------------------------------------------------------------
# Resale value: auto-derived from the purchase price, or manually set
# ---------------------------------------------------------------------------

class AutoResale:
    """Resale value computed as a fixed share of the purchase price."""

    is_manual = False

    def __init__(self, purchase_price, percentage=DEFAULT_RESALE_PERCENTAGE):
        self.purchase_price = purchase_price
        self.percentage = percentage

    @property
    def value(self):
        return estimated_resale(self.purchase_price, self.percentage)

    def __repr__(self):
        return f"AutoResale(purchase_price={self.purchase_price!r}, value={self.value})"


class ManualResale:
    """Resale value entered by the user; authoritative until reset."""

    is_manual = True

    def __init__(self, value):
        self._value = value

    @property
    def value(self):
        return to_number(self._value)

    def __repr__(self):
        return f"ManualResale(value={self.value})"


def resolve_resale(financial):
    """Pick the resale source for a ``financial`` dict.

    ``manualResaleValue`` set means ``estimatedResaleValue`` wins; otherwise
    the value is always derived from ``purchasePrice``.
    """
    financial = financial if isinstance(financial, dict) else {}
    if financial.get('manualResaleValue'):
        return ManualResale(financial.get('estimatedResaleValue'))
    return AutoResale(financial.get('purchasePrice'))


def reset_resale(financial):
    """Return a copy of ``financial`` switched back to the auto resale value."""
    reset = dict(financial) if isinstance(financial, dict) else {}
    reset['manualResaleValue'] = False
    reset['estimatedResaleValue'] = AutoResale(reset.get('purchasePrice')).value
    return reset


def apply_resale(financial):
    """Return a copy of ``financial`` whose stored resale matches its source."""
    resolved = dict(financial) if isinstance(financial, dict) else {}
    source = resolve_resale(resolved)
    resolved['manualResaleValue'] = source.is_manual
    resolved['estimatedResaleValue'] = source.value
    return resolved


# ---------------------------------------------------------------------------
# Cost functions
# ---------------------------------------------------------------------------

def annual_hours(days_per_year, hours_per_day):
    return round_half_up(to_number(days_per_year) * to_number(hours_per_day))


def annual_depreciation(purchase_price, resale_value, years_of_service):
    """Straight-line depreciation; service life below 1 year counts as 1."""
    years = max(to_number(years_of_service), 1)
    return round_half_up((to_number(purchase_price) - to_number(resale_value)) / years)


def annual_fuel(daily_fuel_cost, days_per_year):
    return round_half_up(to_number(daily_fuel_cost) * to_number(days_per_year))


def annual_maintenance(level, custom_cost=None):
    """A positive custom cost wins; otherwise the preset table, 'standard' by default."""
    custom = to_number(custom_cost)
    if custom > 0:
        return custom
    return MAINTENANCE_COSTS.get(level, MAINTENANCE_COSTS[DEFAULT_MAINTENANCE_LEVEL])


def total_annual_cost(depreciation, fuel, maintenance, insurance):
    return round_half_up(
        to_number(depreciation) + to_number(fuel)
        + to_number(maintenance) + to_number(insurance)
    )


def hourly_cost(total_cost, hours):
    return round2(to_number(total_cost) / max(to_number(hours), 1))


def recommended_rate(cost_per_hour):
    return round2(to_number(cost_per_hour) * RECOMMENDED_MARKUP)


def estimated_resale(purchase_price, percentage=DEFAULT_RESALE_PERCENTAGE):
    percent = to_number(percentage) or DEFAULT_RESALE_PERCENTAGE
    return round_half_up(to_number(purchase_price) * percent)


def utilization(actual_hours, planned_hours):
    """Logged hours as a whole-number percentage of planned annual hours."""
    return round_half_up(100 * to_number(actual_hours) / max(to_number(planned_hours), 1))


def compute_all(record):
    """Compute the full ``calculated`` block for an equipment record.

    Only ``usage`` and ``financial`` are read. The custom maintenance cost is
    used only when the level is 'custom'; the resale value comes from
    resolve_resale().

    Returns:
        dict: annualHours, annualDepreciation, annualFuel, annualMaintenance,
        totalAnnualCost, hourlyCost, recommendedRate.
    """
    usage = section(record, 'usage')
    financial = section(record, 'financial')

    days = usage.get('daysPerYear')
    hours = annual_hours(days, usage.get('hoursPerDay'))

    depreciation = annual_depreciation(
        financial.get('purchasePrice'),
        resolve_resale(financial).value,
        financial.get('yearsOfService'),
    )
    fuel = annual_fuel(financial.get('dailyFuelCost'), days)

    level = financial.get('maintenanceLevel')
    custom_cost = financial.get('customMaintenanceCost') if level == CUSTOM_MAINTENANCE_LEVEL else None
    maintenance = annual_maintenance(level, custom_cost)

    total = total_annual_cost(depreciation, fuel, maintenance, financial.get('annualInsuranceCost'))
    per_hour = hourly_cost(total, hours)

    return {
        'annualHours': hours,
        'annualDepreciation': depreciation,
        'annualFuel': fuel,
        'annualMaintenance': maintenance,
        'totalAnnualCost': total,
        'hourlyCost': per_hour,
        'recommendedRate': recommended_rate(per_hour),
    }


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

def format_currency(amount, include_cents=True):
    """Format a dollar amount, e.g. 1234.5 -> '$1,234.50'."""
    value = to_number(amount)
    sign = '-' if value < 0 else ''
    if include_cents:
        return f"{sign}${abs(round2(value)):,.2f}"
    return f"{sign}${round_half_up(abs(value)):,}"


def format_percentage(decimal):
    """Format a ratio as a whole percentage, e.g. 0.354 -> '35%'."""
    return f"{round_half_up(to_number(decimal) * 100)}%"
