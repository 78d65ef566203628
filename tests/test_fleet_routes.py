"""
Integration tests for the fleet API blueprint.
Runs the Flask app against a temporary sqlite store.
"""

import io
import json

import pytest

from app import create_app


@pytest.fixture
def app_client(store):
    app = create_app(store)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def created(app_client, mulcher_input):
    response = app_client.post('/api/equipment', json=mulcher_input)
    return response.get_json()['equipment']


class TestCrud:
    def test_create(self, app_client, mulcher_input):
        response = app_client.post('/api/equipment', json=mulcher_input)
        assert response.status_code == 201
        data = response.get_json()
        assert data['equipment']['calculated']['hourlyCost'] == 27.52
        assert data['alerts'] == []

    def test_create_invalid(self, app_client):
        response = app_client.post('/api/equipment', json={'identity': {'equipmentName': 'x'}})
        assert response.status_code == 400
        assert 'make' in response.get_json()['errors']

    def test_create_with_non_object_sections(self, app_client, store):
        response = app_client.post('/api/equipment', json={'identity': 'abc', 'usage': [1], 'financial': 5})
        assert response.status_code == 400
        assert 'equipmentName' in response.get_json()['errors']
        assert store.equipment == []

    def test_create_storage_failure(self, app_client, store, mulcher_input, monkeypatch):
        monkeypatch.setattr(store.gateway, 'write_all', lambda equipment: False)
        response = app_client.post('/api/equipment', json=mulcher_input)
        assert response.status_code == 500
        assert store.equipment == []

    def test_get_with_metrics(self, app_client, created):
        response = app_client.get(f"/api/equipment/{created['id']}")
        assert response.status_code == 200
        assert 'metrics' in response.get_json()

    def test_get_missing(self, app_client):
        assert app_client.get('/api/equipment/nope').status_code == 404

    def test_update(self, app_client, created):
        response = app_client.put(f"/api/equipment/{created['id']}", json={'usage': {'hoursPerDay': 8}})
        assert response.status_code == 200
        assert response.get_json()['equipment']['calculated']['annualHours'] == 1600

    def test_update_missing(self, app_client):
        assert app_client.put('/api/equipment/nope', json={}).status_code == 404

    def test_update_with_non_object_section(self, app_client, created):
        response = app_client.put(f"/api/equipment/{created['id']}", json={'usage': 'x'})
        assert response.status_code == 200
        assert response.get_json()['equipment']['calculated'] == created['calculated']

    def test_delete(self, app_client, created, store):
        response = app_client.delete(f"/api/equipment/{created['id']}")
        assert response.status_code == 200
        assert store.equipment == []

    def test_duplicate_and_retire(self, app_client, created, store):
        response = app_client.post(f"/api/equipment/{created['id']}/duplicate")
        assert response.status_code == 201
        response = app_client.post(f"/api/equipment/{created['id']}/retire")
        assert response.get_json()['metadata']['status'] == 'retired'
        assert store.stats()['activeCount'] == 1


class TestQueries:
    def test_list_with_filters(self, app_client, created, skid_steer_input):
        app_client.post('/api/equipment', json=skid_steer_input)
        data = app_client.get('/api/equipment?search=CAT').get_json()
        assert [r['identity']['make'] for r in data['equipment']] == ['Caterpillar']
        assert data['filters']['search'] == 'CAT'

    def test_stats(self, app_client, created):
        stats = app_client.get('/api/equipment/stats').get_json()
        assert stats['totalCount'] == 1
        assert stats['averageHourlyCost'] == 27.52

    def test_insights(self, app_client, created):
        data = app_client.get('/api/equipment/insights').get_json()
        assert data['byCategory']['Forestry Mulcher']['count'] == 1
        assert len(data['recent']) == 1

    def test_constants(self, app_client):
        data = app_client.get('/api/equipment/constants').get_json()
        assert data['categories'][0] == 'All'
        assert data['maintenancePresets']['standard']['annualCost'] == 2600

    def test_preview_does_not_save(self, app_client, store):
        response = app_client.post('/api/equipment/preview', json={
            'usage': {'daysPerYear': 100, 'hoursPerDay': 2},
            'financial': {'purchasePrice': 5000, 'dailyFuelCost': 10},
        })
        data = response.get_json()
        assert data['calculated']['annualHours'] == 200
        assert data['alerts'][-1]['type'] == 'info'
        assert store.equipment == []

    def test_validate(self, app_client, mulcher_input):
        assert app_client.post('/api/equipment/validate', json=mulcher_input).get_json()['isValid']


class TestExportImport:
    def test_export(self, app_client, created):
        response = app_client.get('/api/equipment/export')
        assert response.status_code == 200
        assert 'equipment-directory-' in response.headers['Content-Disposition']
        assert json.loads(response.data)['equipment'][0]['id'] == created['id']

    def test_import_raw_body(self, app_client, store):
        payload = json.dumps({'equipment': [{'id': 'x1', 'identity': {'equipmentName': 'Chipper'}}]})
        response = app_client.post('/api/equipment/import', data=payload, content_type='application/json')
        assert response.get_json() == {'imported': 1, 'total': 1}
        assert store.get_by_id('x1') is not None

    def test_import_file_upload(self, app_client, created):
        exported = app_client.get('/api/equipment/export').data
        response = app_client.post(
            '/api/equipment/import',
            data={'file': (io.BytesIO(exported), 'equipment.json')},
            content_type='multipart/form-data',
        )
        assert response.get_json() == {'imported': 0, 'total': 1}

    def test_import_rejected(self, app_client):
        response = app_client.post('/api/equipment/import', data='{"nope": 1}', content_type='application/json')
        assert response.status_code == 400

    def test_import_rejects_malformed_entry(self, app_client, created, store):
        payload = json.dumps({'equipment': [{'id': 'x', 'identity': 'Chipper'}]})
        response = app_client.post('/api/equipment/import', data=payload, content_type='application/json')
        assert response.status_code == 400
        assert len(store.equipment) == 1

    def test_import_storage_failure(self, app_client, store, monkeypatch):
        monkeypatch.setattr(store.gateway, 'write_all', lambda equipment: False)
        payload = json.dumps({'equipment': [{'id': 'x1'}]})
        response = app_client.post('/api/equipment/import', data=payload, content_type='application/json')
        assert response.status_code == 500
        assert store.equipment == []


class TestDraftAndPreferences:
    def test_draft(self, app_client):
        assert app_client.get('/api/equipment/draft').get_json() == {'draft': None}
        app_client.put('/api/equipment/draft', json={'identity': {'equipmentName': 'WIP'}})
        draft = app_client.get('/api/equipment/draft').get_json()['draft']
        assert draft['identity']['equipmentName'] == 'WIP'
        app_client.delete('/api/equipment/draft')
        assert app_client.get('/api/equipment/draft').get_json() == {'draft': None}

    def test_preferences(self, app_client):
        assert app_client.get('/api/preferences').get_json()['theme'] == 'dark'
        updated = app_client.put('/api/preferences', json={'theme': 'light'}).get_json()
        assert updated['theme'] == 'light'
        assert updated['currency'] == 'USD'

    def test_preferences_rejects_non_object(self, app_client):
        response = app_client.put('/api/preferences', json=['theme', 'light'])
        assert response.status_code == 400
        assert app_client.get('/api/preferences').get_json()['theme'] == 'dark'
