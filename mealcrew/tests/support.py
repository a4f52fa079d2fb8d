"""Shared setup for the API tests: an isolated data directory and a logged-in client."""
import os
import shutil
import tempfile
import unittest
from datetime import date, timedelta

from fastapi.testclient import TestClient

from mealcrew.api.api_run import app
from mealcrew.api.routes.forms import public_meals_cache
from mealcrew.api.routes.plans import get_meal_generator
from mealcrew.events import notifications
from mealcrew.logic.generation.meal_generator import MealGenerator
from mealcrew.utilities.rate_limit import form_generation_limiter, submission_limiter
from mealcrew.utilities.shortener import clear_cache


def next_week() -> str:
    return (date.today() + timedelta(days=7)).isoformat()


def reset_app_state():
    """Clear process-local state so tests do not see each other's limits, caches or feeds."""
    form_generation_limiter.reset()
    submission_limiter.reset()
    public_meals_cache.clear()
    clear_cache()
    notifications.clear()
    notifications.start()


def offline_generator() -> MealGenerator:
    return MealGenerator(use_default_client=False)


class ApiTestCase(unittest.TestCase):
    email = 'manager@example.com'

    def setUp(self):
        self.data_dir = tempfile.mkdtemp(prefix='mealcrew_test_')
        self._previous_data_dir = os.environ.get('MEALCREW_DATA_DIR')
        os.environ['MEALCREW_DATA_DIR'] = self.data_dir
        reset_app_state()
        app.dependency_overrides[get_meal_generator] = offline_generator
        self.client = TestClient(app)
        self.user = self.login()

    def tearDown(self):
        app.dependency_overrides.clear()
        if self._previous_data_dir is None:
            os.environ.pop('MEALCREW_DATA_DIR', None)
        else:
            os.environ['MEALCREW_DATA_DIR'] = self._previous_data_dir
        shutil.rmtree(self.data_dir, ignore_errors=True)

    # -------------------- helpers --------------------
    def login(self, email=None, client=None):
        client = client or self.client
        resp = client.post('/auth/login', json={'email': email or self.email})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()['data']['user']

    def create_group(self, name='Smith Family', adults=2, teens=0, kids=1, toddlers=0, dietary_restrictions=None):
        resp = self.client.post('/api/groups', json={
            'name': name,
            'adults': adults,
            'teens': teens,
            'kids': kids,
            'toddlers': toddlers,
            'dietary_restrictions': dietary_restrictions or [],
        })
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()['data']['group']

    def create_plan(self, group_ids, name='Week plan', notes=None):
        resp = self.client.post('/api/plans', json={
            'name': name,
            'week_start': next_week(),
            'group_ids': group_ids,
            'notes': notes,
        })
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()['data']['plan']

    def generate_meals(self, plan_id, body=None):
        resp = self.client.post(f'/api/plans/{plan_id}/generate-meals', json=body)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()['data']

    def plan_meals(self, plan_id):
        resp = self.client.get(f'/api/plans/{plan_id}/meals')
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()['data']['meals']

    def issue_links(self, plan_id):
        resp = self.client.post('/api/forms', json={'plan_id': plan_id})
        self.assertEqual(resp.status_code, 201, resp.text)
        return {link['role']: link for link in resp.json()['data']['links']}

    def submit(self, token, selections, client=None, **extra):
        client = client or self.client
        return client.post('/api/form-responses', json={'token': token, 'selections': selections, **extra})

    def ready_plan(self, **group_kwargs):
        """A plan with one group, generated meals and issued links."""
        group = self.create_group(**group_kwargs)
        plan = self.create_plan([group['id']])
        self.generate_meals(plan['id'])
        meals = self.plan_meals(plan['id'])
        links = self.issue_links(plan['id'])
        return plan, meals, links
