import tempfile
import unittest
from datetime import date
from fastapi.testclient import TestClient
from mealplan.api.api_run import create_app
from mealplan.domain.Plan import PlanRecord
from mealplan.events.Event_Bus import EventBus
from mealplan.infra.Blob_Store import FileBlobStore


class ManualTimer:
    """Debounce timer that never fires on its own; saves happen through flush/switch."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.daemon = False

    def start(self):
        pass

    def cancel(self):
        pass


CATALOG = {
    "winter_recipes": [{"name": "Chili", "section": "Mains", "tags": ["spicy"]}],
    "summer_recipes": [{"name": "Gazpacho", "section": "Soups", "tags": ["cold"]}],
}


class TestPlansAPI(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = FileBlobStore(self.tmp.name)
        self.store.write("recipes.json", CATALOG)
        self.store.write("MP_2024-12-31.json", PlanRecord.empty().to_dict())
        app = create_app(store=self.store, clock=lambda: date(2025, 1, 1),
                         event_bus=EventBus(), timer_factory=ManualTimer)
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        self.tmp.cleanup()

    def test_get_active_plan(self):
        resp = self.client.get('/api/plan')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['filename'], 'MP_2024-12-31.json')
        self.assertEqual(data['label'], 'Dec 31, 2024')
        self.assertEqual(data['meals'], ['Lunch', 'Dinner'])
        self.assertEqual(len(data['days']), 7)
        self.assertIsNone(data['plan']['Monday']['Lunch'])
        self.assertEqual(data['state'], 'idle')
        self.assertFalse(data['dirty'])

    def test_update_slot_then_flush(self):
        resp = self.client.put('/api/plan/slot', json={
            'day': 'Monday', 'meal': 'Dinner', 'recipe': {'name': 'Chili', 'section': 'Mains'}
        })
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()['changed'])
        self.assertTrue(self.client.get('/api/plan').json()['dirty'])
        self.assertEqual(self.client.post('/api/plan/flush').status_code, 200)
        saved = self.store.read('MP_2024-12-31.json')
        self.assertEqual(saved['Monday']['Dinner']['name'], 'Chili')

    def test_update_slot_validation(self):
        resp = self.client.put('/api/plan/slot', json={'day': 'Monday', 'meal': 'Breakfast', 'recipe': None})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.put('/api/plan/slot', json={'day': 'Caturday', 'meal': 'Lunch'})
        self.assertEqual(resp.status_code, 422)
        resp = self.client.put('/api/plan/slot', json={'day': 'Monday', 'meal': 'Lunch', 'recipe': {'name': ' '}})
        self.assertEqual(resp.status_code, 422)

    def test_create_select_and_list(self):
        resp = self.client.post('/api/plans')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()['filename'], 'MP_2025-01-01.json')
        listing = self.client.get('/api/plans').json()
        self.assertEqual([f['filename'] for f in listing['files']], ['MP_2025-01-01.json', 'MP_2024-12-31.json'])
        self.assertEqual(listing['active'], 'MP_2025-01-01.json')
        self.assertTrue(listing['files'][0]['active'])

        resp = self.client.post('/api/plans/select', json={'filename': 'MP_2024-12-31.json'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['filename'], 'MP_2024-12-31.json')

    def test_select_unknown_or_bad_name(self):
        resp = self.client.post('/api/plans/select', json={'filename': 'MP_1999-01-01.json'})
        self.assertEqual(resp.status_code, 404)
        resp = self.client.post('/api/plans/select', json={'filename': '../secret.json'})
        self.assertEqual(resp.status_code, 422)

    def test_view_and_pdf(self):
        self.store.write('MP_2024-12-01.json', {'Friday': {'Lunch': {'name': 'Gazpacho'}}})
        resp = self.client.get('/api/plans/MP_2024-12-01.json')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data['readonly'])
        self.assertEqual(data['plan']['Friday']['Lunch'], {'name': 'Gazpacho'})
        self.assertIsNone(data['plan']['Friday']['Dinner'])

        resp = self.client.get('/api/plans/MP_2024-12-01.json/pdf')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers['content-type'], 'application/pdf')
        self.assertTrue(resp.content.startswith(b'%PDF'))

        self.assertEqual(self.client.get('/api/plans/notes.txt').status_code, 400)
        self.assertEqual(self.client.get('/api/plans/MP_1999-01-01.json').status_code, 404)

    def test_pdf_with_non_text_recipe_fields(self):
        self.client.put('/api/plan/slot', json={
            'day': 'Monday', 'meal': 'Lunch', 'recipe': {'name': 'X <&>', 'section': 5, 'tags': [1, None, 'ok']}
        })
        self.client.put('/api/plan/slot', json={
            'day': 'Monday', 'meal': 'Dinner', 'recipe': {'name': 'Y', 'section': None, 'tags': 'single'}
        })
        resp = self.client.get('/api/plans/MP_2024-12-31.json/pdf')
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.content.startswith(b'%PDF'))

    def test_delete_requires_confirm(self):
        resp = self.client.delete('/api/plans/MP_2024-12-31.json')
        self.assertEqual(resp.status_code, 400)
        self.assertIsNotNone(self.store.read('MP_2024-12-31.json'))

    def test_delete_last_plan_creates_fresh_one(self):
        resp = self.client.delete('/api/plans/MP_2024-12-31.json', params={'confirm': 'true'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {'deleted': 'MP_2024-12-31.json', 'active': 'MP_2025-01-01.json'})
        files = [f['filename'] for f in self.client.get('/api/plans').json()['files']]
        self.assertEqual(files, ['MP_2025-01-01.json'])
        resp = self.client.delete('/api/plans/MP_1999-01-01.json', params={'confirm': 'true'})
        self.assertEqual(resp.status_code, 404)

    def test_recipes_round_trip_refreshes_plan(self):
        data = self.client.get('/api/recipes').json()
        self.assertEqual(data['source'], 'recipes.json')
        self.assertEqual(data['winter_recipes'][0]['name'], 'Chili')

        self.client.put('/api/plan/slot', json={'day': 'Monday', 'meal': 'Dinner', 'recipe': {'name': 'Chili'}})
        resp = self.client.put('/api/recipes', json={
            'winter_recipes': [{'name': 'Chili', 'section': 'Mains', 'tags': ['spicy', 'beans'],
                                'ingredients': [{'name': 'Beans', 'quantity': '1 can'}, 'Onion']}],
            'summer_recipes': [],
        })
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body['filename'], 'recipes_2025-01-01.json')
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['slots_refreshed'], 1)

        slot = self.client.get('/api/plan').json()['plan']['Monday']['Dinner']
        self.assertEqual(slot['tags'], ['spicy', 'beans'])
        self.assertEqual(slot['season'], 'winter')
        self.assertEqual(self.client.get('/api/recipes').json()['source'], 'recipes_2025-01-01.json')

    def test_autofill(self):
        resp = self.client.post('/api/plan/autofill', json={'filters': [
            {'day': 'Tuesday', 'meal': 'Lunch', 'season': 'summer', 'sections': ['Soups']},
            {'day': 'Tuesday', 'meal': 'Dinner', 'season': 'summer', 'sections': ['Mains']},
        ]})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['filled'], 1)
        self.assertEqual(data['plan']['Tuesday']['Lunch']['name'], 'Gazpacho')
        self.assertIsNone(data['plan']['Tuesday']['Dinner'])
        resp = self.client.post('/api/plan/autofill', json={'filters': [
            {'day': 'Tuesday', 'meal': 'Brunch', 'sections': ['Soups']},
        ]})
        self.assertEqual(resp.status_code, 400)

    def test_events_since_cursor(self):
        cursor = self.client.get('/api/events').json()['next_cursor']
        self.client.post('/api/plans')
        data = self.client.get('/api/events', params={'since': cursor}).json()
        types = [e['type'] for e in data['events']]
        self.assertIn('plan.created', types)
        self.assertGreater(data['next_cursor'], cursor)
        created = [e for e in data['events'] if e['type'] == 'plan.created'][0]
        self.assertEqual(created['filename'], 'MP_2025-01-01.json')

    def test_shutdown_flushes_edits(self):
        self.client.put('/api/plan/slot', json={'day': 'Sunday', 'meal': 'Lunch', 'recipe': {'name': 'Roast'}})
        self.client.__exit__(None, None, None)
        self.client = TestClient(self.client.app)
        self.client.__enter__()
        self.assertEqual(self.store.read('MP_2024-12-31.json')['Sunday']['Lunch'], {'name': 'Roast'})


if __name__ == '__main__':
    unittest.main()
