import unittest

from fastapi.testclient import TestClient

from mealcrew.api.api_run import app
from mealcrew.api.auth import is_public_path
from mealcrew.tests.support import ApiTestCase


class TestPublicPaths(unittest.TestCase):

    def test_public_paths(self):
        self.assertTrue(is_public_path('POST', '/auth/login'))
        self.assertTrue(is_public_path('GET', '/api/forms/abc123/meals'))
        self.assertTrue(is_public_path('HEAD', '/api/forms/abc123/meals'))
        self.assertTrue(is_public_path('POST', '/api/form-responses'))
        self.assertTrue(is_public_path('GET', '/f/cmAb12Cd'))
        self.assertFalse(is_public_path('GET', '/api/form-responses'))
        self.assertFalse(is_public_path('POST', '/api/forms'))
        self.assertFalse(is_public_path('GET', '/api/groups'))
        self.assertTrue(is_public_path('GET', '/api/shared-meals'))
        self.assertFalse(is_public_path('POST', '/api/shared-meals'))


class TestAuthAPI(ApiTestCase):

    def test_api_requires_session(self):
        anonymous = TestClient(app)
        resp = anonymous.get('/api/groups')
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {'success': False, 'error': 'Authentication required'})

    def test_dashboard_redirects_to_login(self):
        anonymous = TestClient(app)
        resp = anonymous.get('/dashboard', follow_redirects=False)
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers['location'], '/?redirectTo=/dashboard')

    def test_login_page_ignores_offsite_redirect(self):
        anonymous = TestClient(app)
        for target in ('//evil.example', '/\\evil.example', 'https://evil.example'):
            resp = anonymous.get('/', params={'redirectTo': target})
            self.assertEqual(resp.status_code, 200)
            self.assertNotIn('evil.example', resp.text)
            self.assertIn('"/dashboard"', resp.text)
        resp = anonymous.get('/', params={'redirectTo': '/dashboard?tab=plans'})
        self.assertIn('"/dashboard?tab=plans"', resp.text)

    def test_login_page_and_dashboard(self):
        anonymous = TestClient(app)
        self.assertEqual(anonymous.get('/').status_code, 200)
        resp = self.client.get('/', follow_redirects=False)
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers['location'], '/dashboard')
        resp = self.client.get('/dashboard')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('text/html', resp.headers['content-type'])

    def test_me(self):
        resp = self.client.get('/api/auth/me')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['data']['user']['email'], self.email)
        self.assertEqual(resp.json()['data']['user']['id'], self.user['id'])

    def test_same_email_same_user(self):
        other = TestClient(app)
        self.assertEqual(self.login(self.email.upper(), client=other)['id'], self.user['id'])

    def test_invalid_login(self):
        resp = TestClient(app).post('/auth/login', json={'email': 'nope'})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()['success'])

    def test_signout(self):
        resp = self.client.post('/api/auth/signout')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get('/api/groups').status_code, 401)

    def test_clear_without_session(self):
        resp = TestClient(app).post('/api/auth/clear')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['data']['message'], 'Session cleared')


if __name__ == '__main__':
    unittest.main()
