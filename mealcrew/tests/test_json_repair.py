import unittest

from mealcrew.logic.generation.json_repair import (
    extract_json_by_balancing, looks_truncated, parse_model_json, remove_trailing_commas, strip_code_fences,
)


class TestJsonRepair(unittest.TestCase):

    def test_plain_json(self):
        self.assertEqual(parse_model_json('{"meals": []}'), {'meals': []})

    def test_code_fences(self):
        text = '```json\n{"meals": [{"title": "Soup"}]}\n```'
        self.assertEqual(strip_code_fences(text), '{"meals": [{"title": "Soup"}]}')
        self.assertEqual(parse_model_json(text)['meals'][0]['title'], 'Soup')

    def test_trailing_commas(self):
        self.assertEqual(remove_trailing_commas('{"a": [1, 2,], }'), '{"a": [1, 2]}')
        self.assertEqual(parse_model_json('{"meals": [{"title": "Soup",},]}'), {'meals': [{'title': 'Soup'}]})

    def test_surrounding_prose(self):
        text = 'Here are your meals: {"meals": [{"title": "Tacos {spicy}"}]} Enjoy!'
        self.assertEqual(extract_json_by_balancing(text), '{"meals": [{"title": "Tacos {spicy}"}]}')
        self.assertEqual(parse_model_json(text)['meals'][0]['title'], 'Tacos {spicy}')

    def test_escaped_quotes_inside_strings(self):
        text = 'x {"title": "The \\"best\\" stew"} y'
        self.assertEqual(parse_model_json(text), {'title': 'The "best" stew'})

    def test_unparseable(self):
        self.assertIsNone(parse_model_json(''))
        self.assertIsNone(parse_model_json('no json here'))
        self.assertIsNone(extract_json_by_balancing('{"a": [1, 2}'))

    def test_truncation(self):
        self.assertTrue(looks_truncated('{"meals": [{"title": "Soup"'))
        self.assertFalse(looks_truncated('{"meals": []}'))


if __name__ == '__main__':
    unittest.main()
