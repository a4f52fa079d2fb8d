"""Shopping list builder.

Provides build_shopping_list(plan_meals, meals_by_id, adult_equivalent) and
group_by_category(items). Every selected meal occurrence contributes its
ingredients scaled from the recipe's servings to the plan's adult equivalent.
"""
from collections import OrderedDict
from typing import Any, Dict, Iterable, List

from mealcrew.logic.scaling.adult_equivalent import scale_quantity
from mealcrew.utilities.constants import INGREDIENT_CATEGORIES

# Fallback keyword mapping for ingredients without a usable category
_CATEGORY_KEYWORDS = {
    "protein": ("chicken", "beef", "pork", "turkey", "lamb", "fish", "salmon", "tuna", "shrimp",
                "egg", "tofu", "tempeh", "bean", "lentil", "chickpea", "sausage", "bacon"),
    "dairy": ("milk", "cheese", "butter", "yogurt", "yoghurt", "cream", "parmesan", "mozzarella"),
    "vegetables": ("onion", "garlic", "carrot", "pepper", "tomato", "potato", "spinach", "broccoli",
                   "lettuce", "cucumber", "zucchini", "mushroom", "celery", "cabbage", "kale", "pea"),
    "fruits": ("apple", "banana", "lemon", "lime", "orange", "berry", "berries", "grape", "mango"),
    "grains": ("rice", "pasta", "bread", "flour", "oat", "quinoa", "noodle", "tortilla", "couscous"),
    "oils_fats": ("oil", "lard", "ghee", "margarine"),
    "spices_herbs": ("salt", "cumin", "paprika", "oregano", "basil", "thyme", "cinnamon", "parsley",
                     "cilantro", "rosemary", "chili", "curry"),
    "condiments": ("sauce", "ketchup", "mustard", "mayonnaise", "vinegar", "soy", "honey", "syrup"),
    "frozen": ("frozen",),
    "canned": ("canned", "tinned"),
}


def _normalize(name: str) -> str:
    return (name or '').strip().lower()


def _stem(word: str) -> str:
    # Simple plural to singular heuristics
    if word.endswith('ies') and len(word) > 3:
        return word[:-3] + 'y'  # berries -> berry
    if word.endswith('oes') and len(word) > 3:
        return word[:-3] + 'o'  # tomatoes -> tomato
    if word.endswith('es') and len(word) > 2 and word[-3] in 'sxzh':
        return word[:-2]  # boxes -> box
    if word.endswith('s') and not word.endswith('ss') and len(word) > 1:
        return word[:-1]
    return word


def _key(name: str) -> str:
    return _stem(_normalize(name))


def categorize(name: str, category: str = '') -> str:
    category = _normalize(category)
    if category in INGREDIENT_CATEGORIES and category != 'other':
        return category
    text = _normalize(name)
    for cat, keywords in _CATEGORY_KEYWORDS.items():
        if any(k in text for k in keywords):
            return cat
    return 'other'


def _ingredient_parts(ing) -> Dict[str, Any]:
    if isinstance(ing, str):
        return {"name": ing.strip(), "amount": 1, "unit": "serving", "category": "other", "per_serving": True}
    if hasattr(ing, 'to_dict'):
        ing = ing.to_dict()
    return {
        "name": str(ing.get('name') or '').strip(),
        "amount": ing.get('amount') or 0,
        "unit": str(ing.get('unit') or '').strip(),
        "category": ing.get('category') or '',
    }


def build_shopping_list(plan_meals: Iterable[Dict[str, Any]], meals_by_id: Dict[str, Any],
                        adult_equivalent: float) -> List[Dict[str, Any]]:
    """Aggregate scaled ingredients of the selected meals.

    Args:
        plan_meals: rows {plan_id, day, meal_id}; each row is one occurrence.
        meals_by_id: meal id -> Meal (or dict with ingredients/servings/title).
        adult_equivalent: plan-wide AE used for scaling.

    Returns:
        List of {name, quantity, unit, category, meal_count, meals}, sorted by
        category then name. Rows pointing at unknown meals are skipped.
    """
    required: Dict[tuple, Dict[str, Any]] = {}

    for row in plan_meals:
        meal = meals_by_id.get(row.get('meal_id'))
        if meal is None:
            continue
        if hasattr(meal, 'to_dict'):
            meal = meal.to_dict()
        servings = meal.get('servings') or 1
        title = meal.get('title', '')
        for raw in meal.get('ingredients', []):
            ing = _ingredient_parts(raw)
            if not ing['name']:
                continue
            try:
                amount = float(ing['amount'])
            except (TypeError, ValueError):
                continue
            k = (_key(ing['name']), ing['unit'].lower())
            entry = required.get(k)
            if entry is None:
                entry = required[k] = {
                    "name": ing['name'],
                    "quantity": 0.0,
                    "unit": ing['unit'],
                    "category": categorize(ing['name'], ing['category']),
                    "meal_count": 0,
                    "meals": [],
                }
            if ing.get('per_serving'):
                # a bare name is one serving per adult equivalent
                entry['quantity'] += amount * adult_equivalent
            else:
                entry['quantity'] += scale_quantity(amount, servings, adult_equivalent)
            entry['meal_count'] += 1
            if title and title not in entry['meals']:
                entry['meals'].append(title)

    items = []
    for entry in required.values():
        entry['quantity'] = round(entry['quantity'], 2)
        items.append(entry)
    order = {c: i for i, c in enumerate(INGREDIENT_CATEGORIES)}
    items.sort(key=lambda x: (order.get(x['category'], len(order)), x['name'].lower()))
    return items


def group_by_category(items: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = OrderedDict()
    for item in items:
        grouped.setdefault(item.get('category') or 'other', []).append(item)
    return grouped


__all__ = ['build_shopping_list', 'group_by_category', 'categorize']
