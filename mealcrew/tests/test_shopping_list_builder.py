import unittest

from mealcrew.domain.Ingredient import Ingredient
from mealcrew.domain.Meal import Meal
from mealcrew.logic.shopping.list_builder import build_shopping_list, categorize, group_by_category


def meal(id, title, servings, ingredients):
    return Meal(id=id, plan_id='plan-1', title=title, servings=servings,
                ingredients=[Ingredient.from_dict(i) for i in ingredients])


class TestShoppingListBuilder(unittest.TestCase):

    def setUp(self):
        self.meals = {
            'm1': meal('m1', 'Tomato Pasta', 4, [
                {'name': 'Tomatoes', 'amount': 4, 'unit': 'whole', 'category': 'vegetables'},
                {'name': 'pasta', 'amount': 1, 'unit': 'lb', 'category': 'grains'},
                {'name': 'olive oil', 'amount': 2, 'unit': 'tbsp', 'category': 'oils_fats'},
            ]),
            'm2': meal('m2', 'Tomato Salad', 2, [
                {'name': 'tomato', 'amount': 2, 'unit': 'Whole', 'category': 'vegetables'},
                {'name': 'olive oil', 'amount': 1, 'unit': 'cup', 'category': 'oils_fats'},
            ]),
        }

    def rows(self, *meal_ids):
        return [{'plan_id': 'plan-1', 'day': 'monday', 'meal_id': mid} for mid in meal_ids]

    def test_scales_to_adult_equivalent(self):
        items = build_shopping_list(self.rows('m1'), self.meals, 2.0)
        pasta = next(i for i in items if i['name'] == 'pasta')
        # 1 lb for 4 servings -> 0.5 lb for 2 AE
        self.assertEqual(pasta['quantity'], 0.5)
        self.assertEqual(pasta['meals'], ['Tomato Pasta'])

    def test_aggregates_plural_names_and_unit_case(self):
        items = build_shopping_list(self.rows('m1', 'm2'), self.meals, 4.0)
        tomatoes = [i for i in items if i['category'] == 'vegetables']
        self.assertEqual(len(tomatoes), 1)
        # 4/4*4 + 2/2*4
        self.assertEqual(tomatoes[0]['quantity'], 8.0)
        self.assertEqual(tomatoes[0]['meal_count'], 2)
        self.assertEqual(tomatoes[0]['meals'], ['Tomato Pasta', 'Tomato Salad'])

    def test_different_units_stay_separate(self):
        items = build_shopping_list(self.rows('m1', 'm2'), self.meals, 4.0)
        oils = [i for i in items if i['name'] == 'olive oil']
        self.assertEqual(sorted(i['unit'] for i in oils), ['cup', 'tbsp'])

    def test_repeated_meal_counts_each_occurrence(self):
        rows = self.rows('m1') + [{'plan_id': 'plan-1', 'day': 'friday', 'meal_id': 'm1'}]
        items = build_shopping_list(rows, self.meals, 4.0)
        pasta = next(i for i in items if i['name'] == 'pasta')
        self.assertEqual(pasta['quantity'], 2.0)
        self.assertEqual(pasta['meal_count'], 2)

    def test_sorted_by_category_order_then_name(self):
        items = build_shopping_list(self.rows('m1', 'm2'), self.meals, 4.0)
        self.assertEqual([i['category'] for i in items], ['vegetables', 'grains', 'oils_fats', 'oils_fats'])

    def test_unknown_meals_and_empty_selection(self):
        self.assertEqual(build_shopping_list(self.rows('missing'), self.meals, 4.0), [])
        self.assertEqual(build_shopping_list([], self.meals, 4.0), [])

    def test_string_ingredients_count_as_one_serving(self):
        meals = {'m9': {'title': 'Snack', 'servings': 2, 'ingredients': ['apples']}}
        items = build_shopping_list(self.rows('m9'), meals, 4.0)
        self.assertEqual(items[0]['name'], 'apples')
        self.assertEqual(items[0]['unit'], 'serving')
        self.assertEqual(items[0]['quantity'], 4.0)
        self.assertEqual(items[0]['category'], 'fruits')

    def test_string_ingredients_ignore_recipe_servings(self):
        meals = {'m9': {'title': 'Roast', 'servings': 4, 'ingredients': ['chicken']}}
        self.assertEqual(build_shopping_list(self.rows('m9'), meals, 3.0)[0]['quantity'], 3.0)
        twice = build_shopping_list(self.rows('m9', 'm9'), meals, 3.0)
        self.assertEqual(twice[0]['quantity'], 6.0)
        self.assertEqual(twice[0]['meal_count'], 2)

    def test_categorize(self):
        self.assertEqual(categorize('chicken breast', 'protein'), 'protein')
        self.assertEqual(categorize('cheddar cheese', 'other'), 'dairy')
        self.assertEqual(categorize('mystery powder', ''), 'other')

    def test_group_by_category(self):
        items = build_shopping_list(self.rows('m1'), self.meals, 4.0)
        grouped = group_by_category(items)
        self.assertEqual(list(grouped), ['vegetables', 'grains', 'oils_fats'])


if __name__ == '__main__':
    unittest.main()
