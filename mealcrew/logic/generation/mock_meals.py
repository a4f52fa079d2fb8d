"""Offline meal library used when no OpenAI key is configured.

Output is deterministic so plans can be built and tested without network
access. Each entry lists the dietary restrictions it satisfies.
"""
from typing import Dict, List

from mealcrew.utilities.constants import DIETARY_RESTRICTION_PROMPTS


def _ing(name, amount, unit, category):
    return {"name": name, "amount": amount, "unit": unit, "category": category}


MEAL_LIBRARY: List[Dict] = [
    {
        "title": "Lemon Herb Roast Chicken",
        "description": "Tender roast chicken with lemon, garlic and herbs",
        "prep_time": 15, "cook_time": 60, "servings": 4, "difficulty": "medium",
        "ingredients": [
            _ing("chicken thighs", 1.5, "lbs", "protein"),
            _ing("lemon", 1, "whole", "fruits"),
            _ing("garlic", 4, "cloves", "vegetables"),
            _ing("olive oil", 2, "tbsp", "oils_fats"),
            _ing("thyme", 1, "tbsp", "spices_herbs"),
        ],
        "instructions": ["Season chicken with lemon, garlic and thyme", "Roast at 200C for 55-60 minutes"],
        "tags": ["roast", "family-friendly"],
        "suitable_for": ["gluten-free", "dairy-free", "nut-free", "paleo", "keto", "low-sodium", "mediterranean"],
    },
    {
        "title": "Vegetable Stir Fry with Rice",
        "description": "Crisp vegetables tossed in a light soy ginger sauce",
        "prep_time": 15, "cook_time": 15, "servings": 4, "difficulty": "easy",
        "ingredients": [
            _ing("broccoli", 2, "cups", "vegetables"),
            _ing("bell pepper", 2, "whole", "vegetables"),
            _ing("carrots", 2, "whole", "vegetables"),
            _ing("rice", 1.5, "cups", "grains"),
            _ing("soy sauce", 3, "tbsp", "condiments"),
        ],
        "instructions": ["Cook rice", "Stir fry vegetables on high heat", "Toss with soy sauce and serve over rice"],
        "tags": ["quick", "vegetarian"],
        "suitable_for": ["vegetarian", "vegan", "dairy-free", "nut-free"],
    },
    {
        "title": "Spaghetti Bolognese",
        "description": "Classic pasta with a slow simmered beef and tomato sauce",
        "prep_time": 10, "cook_time": 40, "servings": 4, "difficulty": "easy",
        "ingredients": [
            _ing("spaghetti", 1, "lbs", "grains"),
            _ing("ground beef", 1, "lbs", "protein"),
            _ing("crushed tomatoes", 28, "oz", "canned"),
            _ing("onion", 1, "whole", "vegetables"),
            _ing("parmesan", 0.5, "cups", "dairy"),
        ],
        "instructions": ["Brown beef with onion", "Add tomatoes and simmer 30 minutes", "Serve over spaghetti with parmesan"],
        "tags": ["pasta", "family-friendly"],
        "suitable_for": ["nut-free"],
    },
    {
        "title": "Chickpea Coconut Curry",
        "description": "Mild curry of chickpeas and spinach in coconut milk",
        "prep_time": 10, "cook_time": 25, "servings": 4, "difficulty": "easy",
        "ingredients": [
            _ing("chickpeas", 2, "cans", "canned"),
            _ing("coconut milk", 14, "oz", "canned"),
            _ing("spinach", 4, "cups", "vegetables"),
            _ing("curry powder", 2, "tbsp", "spices_herbs"),
            _ing("basmati rice", 1.5, "cups", "grains"),
        ],
        "instructions": ["Simmer chickpeas in coconut milk and curry powder", "Stir in spinach", "Serve with rice"],
        "tags": ["curry", "one-pot"],
        "suitable_for": ["vegetarian", "vegan", "gluten-free", "dairy-free", "nut-free", "mediterranean"],
    },
    {
        "title": "Baked Salmon with Roasted Potatoes",
        "description": "Oven baked salmon fillets with crispy herb potatoes",
        "prep_time": 15, "cook_time": 30, "servings": 4, "difficulty": "medium",
        "ingredients": [
            _ing("salmon fillets", 4, "pieces", "protein"),
            _ing("potatoes", 2, "lbs", "vegetables"),
            _ing("olive oil", 3, "tbsp", "oils_fats"),
            _ing("dill", 1, "tbsp", "spices_herbs"),
            _ing("lemon", 1, "whole", "fruits"),
        ],
        "instructions": ["Roast potatoes for 15 minutes", "Add salmon and bake 15 minutes more"],
        "tags": ["seafood", "healthy"],
        "suitable_for": ["gluten-free", "dairy-free", "nut-free", "mediterranean", "low-sodium", "diabetic-friendly"],
    },
    {
        "title": "Black Bean Tacos",
        "description": "Soft tacos with spiced black beans, salsa and avocado",
        "prep_time": 15, "cook_time": 10, "servings": 4, "difficulty": "easy",
        "ingredients": [
            _ing("black beans", 2, "cans", "canned"),
            _ing("corn tortillas", 12, "pieces", "grains"),
            _ing("avocado", 2, "whole", "fruits"),
            _ing("salsa", 1, "cups", "condiments"),
            _ing("cumin", 1, "tsp", "spices_herbs"),
        ],
        "instructions": ["Warm beans with cumin", "Fill tortillas with beans, salsa and avocado"],
        "tags": ["quick", "mexican"],
        "suitable_for": ["vegetarian", "vegan", "gluten-free", "dairy-free", "nut-free"],
    },
    {
        "title": "Greek Salad with Grilled Halloumi",
        "description": "Tomato, cucumber and olive salad topped with grilled halloumi",
        "prep_time": 15, "cook_time": 5, "servings": 4, "difficulty": "easy",
        "ingredients": [
            _ing("halloumi", 8, "oz", "dairy"),
            _ing("tomatoes", 4, "whole", "vegetables"),
            _ing("cucumber", 1, "whole", "vegetables"),
            _ing("olives", 0.5, "cups", "pantry"),
            _ing("olive oil", 2, "tbsp", "oils_fats"),
        ],
        "instructions": ["Chop vegetables and dress with olive oil", "Grill halloumi and place on top"],
        "tags": ["salad", "summer"],
        "suitable_for": ["vegetarian", "gluten-free", "nut-free", "keto", "mediterranean", "diabetic-friendly"],
    },
    {
        "title": "Turkey Meatballs with Zucchini Noodles",
        "description": "Herbed turkey meatballs in tomato sauce over zucchini noodles",
        "prep_time": 20, "cook_time": 25, "servings": 4, "difficulty": "medium",
        "ingredients": [
            _ing("ground turkey", 1, "lbs", "protein"),
            _ing("zucchini", 4, "whole", "vegetables"),
            _ing("tomato sauce", 2, "cups", "canned"),
            _ing("egg", 1, "whole", "protein"),
            _ing("oregano", 1, "tsp", "spices_herbs"),
        ],
        "instructions": ["Form meatballs and bake 20 minutes", "Warm sauce and toss with zucchini noodles"],
        "tags": ["low-carb", "family-friendly"],
        "suitable_for": ["gluten-free", "dairy-free", "nut-free", "keto", "paleo", "diabetic-friendly"],
    },
    {
        "title": "Lentil and Vegetable Soup",
        "description": "Hearty lentil soup with carrots, celery and tomatoes",
        "prep_time": 15, "cook_time": 35, "servings": 6, "difficulty": "easy",
        "ingredients": [
            _ing("red lentils", 1.5, "cups", "protein"),
            _ing("carrots", 3, "whole", "vegetables"),
            _ing("celery", 2, "stalks", "vegetables"),
            _ing("diced tomatoes", 14, "oz", "canned"),
            _ing("vegetable broth", 6, "cups", "pantry"),
        ],
        "instructions": ["Saute vegetables", "Add lentils, tomatoes and broth", "Simmer until lentils are soft"],
        "tags": ["soup", "batch-cooking"],
        "suitable_for": ["vegetarian", "vegan", "gluten-free", "dairy-free", "nut-free", "low-sodium",
                         "diabetic-friendly", "mediterranean"],
    },
    {
        "title": "Cheese and Spinach Omelette",
        "description": "Fluffy omelette filled with spinach and cheddar",
        "prep_time": 5, "cook_time": 10, "servings": 2, "difficulty": "easy",
        "ingredients": [
            _ing("eggs", 4, "whole", "protein"),
            _ing("spinach", 1, "cups", "vegetables"),
            _ing("cheddar cheese", 0.5, "cups", "dairy"),
            _ing("butter", 1, "tbsp", "dairy"),
        ],
        "instructions": ["Whisk eggs and cook in butter", "Fill with spinach and cheese and fold"],
        "tags": ["quick", "breakfast-for-dinner"],
        "suitable_for": ["vegetarian", "gluten-free", "nut-free", "keto"],
    },
]


def _known_restrictions(restrictions: List[str]) -> List[str]:
    normalized = [r.strip().lower() for r in restrictions]
    return [r for r in normalized if r in DIETARY_RESTRICTION_PROMPTS]


def mock_meals(count: int, dietary_restrictions: List[str]) -> List[Dict]:
    """`count` meal dicts compatible with the known restrictions, cycling the library if needed."""
    required = _known_restrictions(dietary_restrictions)
    pool = [m for m in MEAL_LIBRARY if all(r in m["suitable_for"] for r in required)]
    if not pool:
        return []
    meals = []
    for i in range(count):
        base = pool[i % len(pool)]
        meal = {k: v for k, v in base.items() if k != "suitable_for"}
        meal["ingredients"] = [dict(ing) for ing in base["ingredients"]]
        meal["dietary_info"] = list(required)
        if i >= len(pool):
            meal["title"] = f"{base['title']} ({i // len(pool) + 1})"
        meals.append(meal)
    return meals


__all__ = ['MEAL_LIBRARY', 'mock_meals']
