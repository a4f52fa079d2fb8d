import unittest
from datetime import datetime, timedelta, timezone

from mealcrew.logic.forms.links import issue_links, mint_link, new_public_token, remember_link, resolve_link, revoke
from mealcrew.utilities import shortener


class InMemoryLinks:
    """Minimal stand-in for FormLinkRepository lookups."""

    def __init__(self, links):
        self.links = list(links)

    def get_by_token(self, token):
        return next((l for l in self.links if l.public_token == token), None)

    def get_by_short_code(self, code):
        return next((l for l in self.links if l.short_code == code), None)


class TestFormLinks(unittest.TestCase):

    def setUp(self):
        shortener.clear_cache()
        self.now = datetime(2030, 1, 6, 12, 0, tzinfo=timezone.utc)

    def test_public_tokens_are_unique_and_url_safe(self):
        tokens = {new_public_token() for _ in range(100)}
        self.assertEqual(len(tokens), 100)
        for token in tokens:
            self.assertGreaterEqual(len(token), 43)
            self.assertRegex(token, r'^[A-Za-z0-9_-]+$')

    def test_mint_link(self):
        link = mint_link('plan-1', 'co_manager', self.now)
        self.assertEqual(link.plan_id, 'plan-1')
        self.assertTrue(link.short_code.startswith('cm'))
        self.assertEqual(link.expires_at, self.now + timedelta(days=30))
        self.assertTrue(link.can_override)
        self.assertFalse(mint_link('plan-1', 'other', self.now).can_override)

    def test_expiry_boundary(self):
        link = mint_link('plan-1', 'other', self.now)
        self.assertTrue(link.is_active(link.expires_at - timedelta(seconds=1)))
        self.assertTrue(link.is_expired(link.expires_at))
        self.assertFalse(link.is_active(link.expires_at))

    def test_issue_creates_one_link_per_role(self):
        by_role, created = issue_links('plan-1', [], self.now)
        self.assertEqual(set(by_role), {'co_manager', 'other'})
        self.assertEqual(len(created), 2)
        self.assertNotEqual(by_role['co_manager'].public_token, by_role['other'].public_token)

    def test_issue_reuses_active_links(self):
        first, _ = issue_links('plan-1', [], self.now)
        again, created = issue_links('plan-1', list(first.values()), self.now + timedelta(hours=1))
        self.assertEqual(created, [])
        self.assertEqual(again['other'].id, first['other'].id)

    def test_issue_replaces_revoked_or_expired_links(self):
        first, _ = issue_links('plan-1', [], self.now)
        revoke(first.values(), role='other', now=self.now)
        again, created = issue_links('plan-1', list(first.values()), self.now)
        self.assertEqual([l.role for l in created], ['other'])
        self.assertEqual(again['co_manager'].id, first['co_manager'].id)
        self.assertNotEqual(again['other'].id, first['other'].id)

        later = self.now + timedelta(days=31)
        _, created = issue_links('plan-1', list(again.values()), later)
        self.assertEqual(len(created), 2)

    def test_revoke_by_role(self):
        by_role, _ = issue_links('plan-1', [], self.now)
        revoked = revoke(by_role.values(), role='co_manager', now=self.now)
        self.assertEqual([l.role for l in revoked], ['co_manager'])
        self.assertFalse(by_role['co_manager'].is_active(self.now))
        self.assertTrue(by_role['other'].is_active(self.now))
        # revoking again is a no-op
        self.assertEqual(revoke(by_role.values(), now=self.now), [by_role['other']])
        self.assertEqual(revoke(by_role.values(), now=self.now), [])

    def test_resolve_by_token_and_short_code(self):
        by_role, _ = issue_links('plan-1', [], datetime.now(timezone.utc))
        link = by_role['other']
        repo = InMemoryLinks(by_role.values())

        self.assertIs(resolve_link(link.public_token, repo), link)
        # cache miss falls back to storage and refills the cache
        self.assertIs(resolve_link(link.short_code, repo), link)
        self.assertIsNotNone(shortener.resolve_short_code(link.short_code))

        remember_link(by_role['co_manager'])
        self.assertEqual(resolve_link(by_role['co_manager'].short_code, repo).role, 'co_manager')
        self.assertIsNone(resolve_link('unknown-token', repo))
        self.assertIsNone(resolve_link('', repo))


if __name__ == '__main__':
    unittest.main()
