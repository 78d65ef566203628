"""Tests for validation.py: form validation and cost quality alerts."""

import copy

import pytest

from cost_model import compute_all
from validation import (
    quality_alerts, validate_currency, validate_form, validate_maintenance,
    validate_year,
)


# ── Form validation ──

class TestValidateForm:
    def test_valid_record(self, mulcher_input):
        result = validate_form(mulcher_input)
        assert result == {'isValid': True, 'errors': {}}

    def test_empty_record_reports_every_required_field(self):
        result = validate_form({})
        assert result['isValid'] is False
        for field in ('equipmentName', 'year', 'make', 'model', 'category',
                      'daysPerYear', 'hoursPerDay', 'purchasePrice',
                      'dailyFuelCost', 'maintenanceLevel'):
            assert field in result['errors']
        assert result['errors']['equipmentName'] == 'Equipment Name is required'

    def test_does_not_mutate_input(self, mulcher_input):
        mulcher_input['identity']['year'] = 1980
        snapshot = copy.deepcopy(mulcher_input)
        validate_form(mulcher_input)
        assert mulcher_input == snapshot

    @pytest.mark.parametrize("record", [
        {'identity': None, 'usage': None, 'financial': None},
        {'identity': 'abc', 'usage': ['x'], 'financial': 42},
        {'identity': [], 'usage': 'x', 'financial': True},
        'not a dict',
        ['identity'],
        None,
    ])
    def test_never_raises_on_garbage(self, record):
        result = validate_form(record)
        assert result['isValid'] is False
        assert result['errors']['equipmentName'] == 'Equipment Name is required'

    def test_blank_name(self, mulcher_input):
        mulcher_input['identity']['equipmentName'] = '   '
        assert 'equipmentName' in validate_form(mulcher_input)['errors']

    @pytest.mark.parametrize("year,ok", [(1990, True), (2030, True), (1989, False), (2031, False)])
    def test_year_range(self, mulcher_input, year, ok):
        mulcher_input['identity']['year'] = year
        assert ('year' not in validate_form(mulcher_input)['errors']) is ok

    @pytest.mark.parametrize("days,ok", [(100, True), (300, True), (99, False), (301, False), ('', False)])
    def test_days_per_year_range(self, mulcher_input, days, ok):
        mulcher_input['usage']['daysPerYear'] = days
        assert ('daysPerYear' not in validate_form(mulcher_input)['errors']) is ok

    @pytest.mark.parametrize("hours,ok", [(2, True), (16, True), (1, False), (17, False)])
    def test_hours_per_day_range(self, mulcher_input, hours, ok):
        mulcher_input['usage']['hoursPerDay'] = hours
        assert ('hoursPerDay' not in validate_form(mulcher_input)['errors']) is ok

    def test_purchase_price_bounds(self, mulcher_input):
        mulcher_input['financial']['purchasePrice'] = 500
        errors = validate_form(mulcher_input)['errors']
        assert errors['purchasePrice'] == 'Purchase Price must be at least $1,000'
        mulcher_input['financial']['purchasePrice'] = 2000000
        errors = validate_form(mulcher_input)['errors']
        assert errors['purchasePrice'] == 'Purchase Price must be less than $1,000,000'

    def test_fuel_cost_required(self, mulcher_input):
        del mulcher_input['financial']['dailyFuelCost']
        errors = validate_form(mulcher_input)['errors']
        assert errors['dailyFuelCost'] == 'Daily Fuel Cost must be a valid positive number'

    def test_years_of_service_optional_but_bounded(self, mulcher_input):
        del mulcher_input['financial']['yearsOfService']
        assert 'yearsOfService' not in validate_form(mulcher_input)['errors']
        mulcher_input['financial']['yearsOfService'] = 20
        assert 'yearsOfService' in validate_form(mulcher_input)['errors']

    def test_insurance_optional(self, mulcher_input):
        del mulcher_input['financial']['annualInsuranceCost']
        assert validate_form(mulcher_input)['isValid']

    def test_insurance_range(self, mulcher_input):
        mulcher_input['financial']['annualInsuranceCost'] = -5
        assert 'annualInsuranceCost' in validate_form(mulcher_input)['errors']
        mulcher_input['financial']['annualInsuranceCost'] = 150000
        assert 'annualInsuranceCost' in validate_form(mulcher_input)['errors']

    def test_custom_maintenance_needs_positive_cost(self, mulcher_input):
        mulcher_input['financial']['maintenanceLevel'] = 'custom'
        assert 'maintenanceLevel' in validate_form(mulcher_input)['errors']
        mulcher_input['financial']['customMaintenanceCost'] = 1800
        assert 'maintenanceLevel' not in validate_form(mulcher_input)['errors']


class TestFieldValidators:
    def test_validate_year_non_numeric(self):
        assert validate_year('soon') == 'Valid year is required'

    def test_validate_currency_ok(self):
        assert validate_currency('250', 'Fuel', 1, 1000) is None

    def test_validate_maintenance_missing(self):
        assert validate_maintenance(None, None) == 'Maintenance level is required'
        assert validate_maintenance(None, 1200) is None
        assert validate_maintenance('intense', None) is None


# ── Quality alerts ──

class TestQualityAlerts:
    def test_reference_mulcher_has_no_alerts(self, mulcher_input):
        assert quality_alerts(compute_all(mulcher_input), mulcher_input) == []

    def test_low_cost_fires_warning_and_error(self):
        alerts = quality_alerts({'hourlyCost': 5, 'recommendedRate': 6.5, 'annualHours': 1000})
        assert [a['type'] for a in alerts] == ['warning', 'error']
        assert alerts[0]['message'] == 'Hourly cost seems low - verify inputs'

    def test_high_cost_warning(self):
        alerts = quality_alerts({'hourlyCost': 250, 'recommendedRate': 325, 'annualHours': 1000})
        assert alerts == [{'type': 'warning', 'message': 'Hourly cost seems high - check fuel/maintenance'}]

    def test_low_utilization_info(self):
        alerts = quality_alerts({'hourlyCost': 50, 'recommendedRate': 65, 'annualHours': 300})
        assert alerts == [{'type': 'info', 'message': 'Low utilization - asset may be underused'}]

    def test_all_alerts_in_declaration_order(self):
        alerts = quality_alerts({'hourlyCost': 0, 'recommendedRate': 0, 'annualHours': 0})
        assert [a['type'] for a in alerts] == ['warning', 'error', 'info']

    def test_hours_fall_back_to_usage(self):
        record = {'usage': {'daysPerYear': 100, 'hoursPerDay': 2}}
        alerts = quality_alerts({'hourlyCost': 50, 'recommendedRate': 65}, record)
        assert alerts[-1]['type'] == 'info'

    def test_boundaries_do_not_fire(self):
        alerts = quality_alerts({'hourlyCost': 10, 'recommendedRate': 25, 'annualHours': 400})
        assert alerts == []

    def test_non_object_inputs_are_treated_as_empty(self):
        alerts = quality_alerts('garbage', {'usage': 'x'})
        assert [a['type'] for a in alerts] == ['warning', 'error', 'info']
