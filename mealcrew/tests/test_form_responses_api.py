import unittest

from fastapi.testclient import TestClient

from mealcrew.api.api_run import app
from mealcrew.utilities.rate_limit import submission_limiter
from mealcrew.tests.support import ApiTestCase


class TestFormResponsesAPI(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.plan, self.meals, self.links = self.ready_plan()
        self.public = TestClient(app)

    def meal_ids(self, n):
        return [m['id'] for m in self.meals[:n]]

    def test_submit(self):
        ids = self.meal_ids(2)
        resp = self.submit(self.links['other']['token'], {'Monday': [ids[0]], 'wednesday': [ids[1]]},
                           client=self.public, comments='No mushrooms please')
        self.assertEqual(resp.status_code, 201, resp.text)
        data = resp.json()['data']
        self.assertEqual(data['response']['role'], 'other')
        self.assertEqual(data['response']['selections_count'], 2)
        self.assertEqual(data['message'], 'Response submitted as other')
        self.assertFalse(data['next_steps']['manager_notified'])

        listed = self.client.get('/api/form-responses', params={'plan_id': self.plan['id']}).json()['data']
        self.assertEqual(listed['total'], 1)
        stored = listed['responses']['other'][0]
        self.assertEqual(stored['selections'], {'monday': [ids[0]], 'wednesday': [ids[1]]})
        self.assertEqual(stored['comments'], 'No mushrooms please')

    def test_submit_by_short_code_uses_link_role(self):
        resp = self.submit(self.links['co_manager']['short_code'], {'friday': self.meal_ids(1)}, client=self.public)
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()['data']['response']['role'], 'co_manager')
        self.assertTrue(resp.json()['data']['next_steps']['manager_notified'])

    def test_read_model_shows_latest_selection(self):
        token = self.links['other']['token']
        self.public.get(f'/api/forms/{token}/meals')
        self.submit(token, {'monday': self.meal_ids(1)}, client=self.public)
        data = self.public.get(f'/api/forms/{token}/meals').json()['data']
        self.assertFalse(data['meta']['cached'])
        self.assertEqual(data['current_selections'], {'monday': self.meal_ids(1)})

    def test_duplicate_submission(self):
        token = self.links['other']['token']
        first = self.submit(token, {'monday': self.meal_ids(1)}, client=self.public, idempotency_key='abc-123')
        self.assertEqual(first.status_code, 201)
        second = self.submit(token, {'monday': self.meal_ids(1)}, client=self.public, idempotency_key='abc-123')
        self.assertEqual(second.status_code, 200)
        self.assertTrue(second.json()['data']['duplicate'])
        self.assertEqual(second.json()['data']['response']['id'], first.json()['data']['response']['id'])

        changed = self.submit(token, {'monday': self.meal_ids(2)}, client=self.public, idempotency_key='abc-123')
        self.assertEqual(changed.status_code, 201)

        # without a key every submission is stored
        self.submit(token, {'monday': self.meal_ids(1)}, client=self.public)
        listed = self.client.get('/api/form-responses', params={'plan_id': self.plan['id']}).json()['data']
        self.assertEqual(listed['total'], 3)

    def test_invalid_token(self):
        resp = self.submit('bogus-token', {'monday': self.meal_ids(1)}, client=self.public)
        self.assertEqual(resp.status_code, 401)

    def test_revoked_link(self):
        self.client.delete('/api/forms', params={'plan_id': self.plan['id']})
        resp = self.submit(self.links['co_manager']['token'], {'monday': self.meal_ids(1)}, client=self.public)
        self.assertEqual(resp.status_code, 401)

    def test_foreign_origin(self):
        resp = self.public.post('/api/form-responses', headers={'Origin': 'https://evil.example'},
                                json={'token': self.links['other']['token'], 'selections': {}})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()['error'], 'Invalid origin')

    def test_unknown_meal_and_bad_day(self):
        resp = self.submit(self.links['other']['token'], {'monday': ['not-a-meal']}, client=self.public)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()['error'], 'Unknown meal ids: not-a-meal')

        resp = self.submit(self.links['other']['token'], {'funday': self.meal_ids(1)}, client=self.public)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Unknown day 'funday'", resp.json()['error'])

    def test_body_must_be_json(self):
        resp = self.public.post('/api/form-responses', content=b'not json',
                                headers={'Content-Type': 'application/json'})
        self.assertEqual(resp.status_code, 400)

    def test_rate_limited(self):
        token = self.links['other']['token']
        for i in range(submission_limiter.limit):
            resp = self.submit(token, {'monday': self.meal_ids(i % 2 + 1)}, client=self.public)
            self.assertEqual(resp.status_code, 201)
        resp = self.submit(token, {'monday': self.meal_ids(1)}, client=self.public)
        self.assertEqual(resp.status_code, 429)

    def test_list_requires_owner(self):
        stranger = TestClient(app)
        self.login('stranger@example.com', client=stranger)
        resp = stranger.get('/api/form-responses', params={'plan_id': self.plan['id']})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.public.get('/api/form-responses', params={'plan_id': self.plan['id']}).status_code, 401)

    def test_resolution_preview(self):
        ids = self.meal_ids(3)
        self.submit(self.links['other']['token'], {'monday': [ids[0]], 'tuesday': [ids[1]]}, client=self.public)
        self.submit(self.links['co_manager']['token'], {'monday': [ids[2]]}, client=self.public)
        preview = self.client.get('/api/form-responses',
                                  params={'plan_id': self.plan['id']}).json()['data']['resolution_preview']
        self.assertEqual(preview['selections'], {'monday': [ids[2]], 'tuesday': [ids[1]]})
        self.assertEqual(preview['overridden_days'], ['monday'])


if __name__ == '__main__':
    unittest.main()
