"""
Pytest configuration and shared fixtures for the equipment calculator tests.
"""

import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before importing app modules
os.environ.setdefault("FLASK_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs"))

from storage import StorageGateway
from fleet_store import FleetStore


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "fleet_test.db")


@pytest.fixture
def gateway(db_path):
    return StorageGateway(db_path)


@pytest.fixture
def store(gateway):
    fleet = FleetStore(gateway)
    fleet.load()
    return fleet


@pytest.fixture
def mulcher_input():
    """The reference forestry mulcher from the cost worksheet."""
    return {
        'identity': {
            'equipmentName': 'Big Mulcher',
            'year': 2021,
            'category': 'Forestry Mulcher',
            'make': 'Fecon',
            'model': 'FTX128L',
            'serialNumber': 'FX-0001',
        },
        'usage': {'daysPerYear': 200, 'hoursPerDay': 6},
        'financial': {
            'purchasePrice': 65000,
            'estimatedResaleValue': 13000,
            'manualResaleValue': False,
            'yearsOfService': 7,
            'dailyFuelCost': 100,
            'maintenanceLevel': 'standard',
            'annualInsuranceCost': 3000,
        },
    }


@pytest.fixture
def skid_steer_input():
    return {
        'identity': {
            'equipmentName': 'Skid Steer 2',
            'year': 2018,
            'category': 'Skid Steer',
            'make': 'Caterpillar',
            'model': '299D3',
        },
        'usage': {'daysPerYear': 150, 'hoursPerDay': 3},
        'financial': {
            'purchasePrice': 40000,
            'yearsOfService': 5,
            'dailyFuelCost': 40,
            'maintenanceLevel': 'minimal',
            'annualInsuranceCost': 1200,
        },
    }


@pytest.fixture
def truck_input():
    return {
        'identity': {
            'equipmentName': 'Crew Truck',
            'year': 2020,
            'category': 'Pickup Truck',
            'make': 'Ford',
            'model': 'F-250',
        },
        'usage': {'daysPerYear': 250, 'hoursPerDay': 10},
        'financial': {
            'purchasePrice': 55000,
            'yearsOfService': 8,
            'dailyFuelCost': 60,
            'maintenanceLevel': 'custom',
            'customMaintenanceCost': 3500,
            'annualInsuranceCost': 2000,
        },
    }
