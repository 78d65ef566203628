"""
Constants and static data for the equipment cost calculator.
Centralizes categories, maintenance cost tables, usage presets, validation
limits and the thresholds behind the cost quality alerts.
"""

# Equipment categories. 'All' is the filter sentinel, not a real category.
ALL_CATEGORIES = 'All'

EQUIPMENT_CATEGORIES = [
    ALL_CATEGORIES,
    'Forestry Mulcher',
    'Skid Steer',
    'Pickup Truck',
    'Dump Truck',
    'Chipper',
    'Stump Grinder',
    'Other'
]

VALID_STATUSES = ['active', 'maintenance', 'retired']

# Annual maintenance cost per preset level (USD)
MAINTENANCE_COSTS = {
    'minimal': 1300,
    'standard': 2600,
    'intense': 4550
}

DEFAULT_MAINTENANCE_LEVEL = 'standard'
CUSTOM_MAINTENANCE_LEVEL = 'custom'
MAINTENANCE_LEVELS = list(MAINTENANCE_COSTS) + [CUSTOM_MAINTENANCE_LEVEL]

MAINTENANCE_PRESETS = {
    'minimal': {
        'name': 'Minimal',
        'description': 'Basic oil changes, filters',
        'annualCost': MAINTENANCE_COSTS['minimal']
    },
    'standard': {
        'name': 'Standard',
        'description': 'Regular service schedule',
        'annualCost': MAINTENANCE_COSTS['standard']
    },
    'intense': {
        'name': 'Intense',
        'description': 'Heavy-duty operations, frequent repairs',
        'annualCost': MAINTENANCE_COSTS['intense']
    }
}

USAGE_PRESETS = {
    'light': {
        'name': 'Light',
        'description': '2-4 hours/day',
        'hoursRange': '2-4',
        'hoursPerDay': 3,
        'daysPerYear': 150
    },
    'moderate': {
        'name': 'Moderate',
        'description': '4-8 hours/day',
        'hoursRange': '4-8',
        'hoursPerDay': 6,
        'daysPerYear': 200
    },
    'heavy': {
        'name': 'Heavy',
        'description': '8+ hours/day',
        'hoursRange': '8-12',
        'hoursPerDay': 10,
        'daysPerYear': 250
    }
}

DEFAULT_RESALE_PERCENTAGE = 0.2
RECOMMENDED_MARKUP = 1.3

# Inclusive (min, max) bounds used by validation.validate_form
VALIDATION_LIMITS = {
    'year': {'min': 1990, 'max': 2030},
    'daysPerYear': {'min': 100, 'max': 300},
    'hoursPerDay': {'min': 2, 'max': 16},
    'annualHours': {'min': 200, 'max': 4800},
    'yearsOfService': {'min': 1, 'max': 15},
    'purchasePrice': {'min': 1000, 'max': 1000000},
    'dailyFuelCost': {'min': 1, 'max': 1000},
    'annualInsuranceCost': {'min': 0, 'max': 100000}
}

QUALITY_THRESHOLDS = {
    'hourlyCostLow': 10,
    'hourlyCostHigh': 200,
    'recommendedRateMinimum': 25,
    'lowUtilizationHours': 400
}

# Fleet insight thresholds
ATTENTION_HOURLY_COST = 150
ATTENTION_AGE_YEARS = 10
ATTENTION_UTILIZATION = 30

# Filter / sort
SORT_FIELDS = ['name', 'cost', 'date', 'category']
SORT_ORDERS = ['asc', 'desc']

DEFAULT_FILTERS = {
    'category': ALL_CATEGORIES,
    'search': '',
    'sortBy': 'name',
    'sortOrder': 'asc'
}

# Storage keys and export format
STORAGE_KEY = 'equipment-directory'
DRAFT_KEY = 'equipment-draft'
PREFERENCES_KEY = 'app-preferences'
EXPORT_VERSION = '1.0'
EXPORT_FILENAME_PREFIX = 'equipment-directory'

DEFAULT_PREFERENCES = {
    'theme': 'dark',
    'currency': 'USD',
    'defaultCategory': 'Forestry Mulcher',
    'autoSave': True,
    'showCalculations': True
}
