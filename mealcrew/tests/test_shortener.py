import unittest
from datetime import datetime, timedelta, timezone

from mealcrew.utilities import shortener
from mealcrew.utilities.shortener import (
    ShortCodeMapping, cache_mapping, extract_role_from_short_code, generate_public_url,
    generate_short_code, has_problematic_pattern, increment_views, is_valid_short_code, resolve_short_code,
)


class TestShortCodes(unittest.TestCase):

    def setUp(self):
        shortener.clear_cache()

    def test_generated_codes_carry_role_prefix(self):
        for _ in range(50):
            cm = generate_short_code('co_manager')
            ot = generate_short_code('other')
            self.assertTrue(cm.startswith('cm'))
            self.assertTrue(ot.startswith('ot'))
            self.assertEqual(len(cm), 8)
            self.assertTrue(is_valid_short_code(cm))
            self.assertFalse(has_problematic_pattern(cm))
            self.assertEqual(extract_role_from_short_code(ot), 'other')

    def test_validation(self):
        self.assertTrue(is_valid_short_code('cmAb12Cd'))
        self.assertFalse(is_valid_short_code('xxAb12Cd'))
        self.assertFalse(is_valid_short_code('cmAb12C'))
        self.assertFalse(is_valid_short_code('cmAb-2Cd'))
        self.assertFalse(is_valid_short_code(None))
        self.assertIsNone(extract_role_from_short_code('zz123456'))

    def test_problematic_patterns(self):
        self.assertTrue(has_problematic_pattern('cm000abc'))
        self.assertTrue(has_problematic_pattern('otapiXYZ'))
        self.assertFalse(has_problematic_pattern('cmQ7rT2x'))

    def test_public_url(self):
        self.assertEqual(generate_public_url('cmQ7rT2x', 'https://meals.example.com/'),
                         'https://meals.example.com/f/cmQ7rT2x')

    def test_cache_resolution_and_expiry(self):
        now = datetime.now(timezone.utc)
        cache_mapping(ShortCodeMapping('cmQ7rT2x', 'token-1', 'co_manager', now, now + timedelta(days=1)))
        cache_mapping(ShortCodeMapping('otQ7rT2x', 'token-2', 'other', now, now + timedelta(seconds=5)))

        self.assertEqual(resolve_short_code('cmQ7rT2x', now).public_token, 'token-1')
        increment_views('cmQ7rT2x')
        self.assertEqual(resolve_short_code('cmQ7rT2x', now).views, 1)

        # expired mappings are dropped on lookup
        self.assertIsNone(resolve_short_code('otQ7rT2x', now + timedelta(seconds=5)))
        self.assertIsNone(resolve_short_code('otQ7rT2x', now))
        self.assertIsNone(resolve_short_code('cmUNKNOW', now))


if __name__ == '__main__':
    unittest.main()
