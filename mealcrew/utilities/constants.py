from typing import Final

DATE_FORMAT: Final[str] = "%Y-%m-%d"

# Adult Equivalent weights: AE = adults*1.0 + teens*1.2 + kids*0.7 + toddlers*0.4
AE_WEIGHTS: Final[dict[str, float]] = {"adults": 1.0, "teens": 1.2, "kids": 0.7, "toddlers": 0.4}
DEMOGRAPHIC_FIELDS: Final[tuple[str, ...]] = ("adults", "teens", "kids", "toddlers")
MAX_PER_DEMOGRAPHIC: Final[int] = 99

ROLE_CO_MANAGER: Final[str] = "co_manager"
ROLE_OTHER: Final[str] = "other"
FORM_ROLES: Final[tuple[str, ...]] = (ROLE_CO_MANAGER, ROLE_OTHER)
SHORT_CODE_PREFIXES: Final[dict[str, str]] = {ROLE_CO_MANAGER: "cm", ROLE_OTHER: "ot"}

GROUP_STATUSES: Final[tuple[str, ...]] = ("active", "inactive")
PLAN_DRAFT: Final[str] = "draft"
PLAN_COLLECTING: Final[str] = "collecting"
PLAN_FINALIZED: Final[str] = "finalized"
PLAN_STATUSES: Final[tuple[str, ...]] = (PLAN_DRAFT, PLAN_COLLECTING, PLAN_FINALIZED)

DAYS: Final[tuple[str, ...]] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
)

LINK_INSTRUCTIONS: Final[dict[str, str]] = {
    ROLE_CO_MANAGER: "Send this link to the main decision-maker. Their choices will override any conflicts.",
    ROLE_OTHER: "Send this link to other participants for input. Their choices are advisory.",
}
FORM_INSTRUCTIONS: Final[dict[str, str]] = {
    ROLE_CO_MANAGER: "Your selections will be final and override any conflicts with other participants.",
    ROLE_OTHER: "Your selections will be considered along with the co-manager's choices. "
                "The co-manager has final say in case of conflicts.",
}
SUBMISSION_INSTRUCTIONS: Final[dict[str, str]] = {
    ROLE_CO_MANAGER: "Your selections have been recorded and will override any conflicts.",
    ROLE_OTHER: "Your selections have been recorded. The co-manager will make final decisions.",
}

MAX_COMMENT_LENGTH: Final[int] = 1000
IDEMPOTENCY_WINDOW_SECONDS: Final[int] = 3600

# Shared meal links
MAX_SHARE_DAYS: Final[int] = 365

# Meal generation
DEFAULT_MEALS_PER_GROUP: Final[int] = 7
DEFAULT_EXTRA_MEALS: Final[int] = 2
MAX_MEALS_PER_GROUP: Final[int] = 10
MAX_GENERATION_RETRIES: Final[int] = 3
MIN_PREP_TIME: Final[int] = 5
MAX_PREP_TIME: Final[int] = 240
MIN_SERVINGS: Final[int] = 1
MAX_SERVINGS: Final[int] = 20
DIFFICULTIES: Final[tuple[str, ...]] = ("easy", "medium", "hard")

INGREDIENT_CATEGORIES: Final[tuple[str, ...]] = (
    "protein", "vegetables", "fruits", "grains", "dairy", "oils_fats",
    "spices_herbs", "condiments", "pantry", "frozen", "canned", "other",
)

DIETARY_RESTRICTION_PROMPTS: Final[dict[str, str]] = {
    "vegetarian": "No meat, poultry, or fish. Eggs and dairy are acceptable.",
    "vegan": "No animal products whatsoever including meat, dairy, eggs, honey.",
    "gluten-free": "No wheat, barley, rye, or other gluten-containing grains.",
    "dairy-free": "No milk, cheese, butter, yogurt, or other dairy products.",
    "nut-free": "No tree nuts or peanuts. Check all ingredients for nut contamination.",
    "low-sodium": "Use minimal salt and avoid high-sodium processed ingredients.",
    "diabetic-friendly": "Low sugar, complex carbohydrates, balanced nutrition.",
    "keto": "Very low carbohydrate, high fat, moderate protein.",
    "paleo": "No grains, legumes, dairy, or processed foods. Focus on whole foods.",
    "mediterranean": "Emphasize olive oil, fish, vegetables, whole grains, and legumes.",
}

SYSTEM_PROMPT: Final[str] = (
    "You are a meal planning assistant. Return ONLY valid JSON with no additional text. "
    "Use decimal numbers (0.5, 0.25) not fractions. Generate EXACTLY the specified number of meals."
)
MEAL_JSON_FORMAT: Final[str] = (
    """
{
  "meals": [
    {
      "title": str,
      "description": str,
      "prep_time": int,
      "cook_time": int,
      "servings": int,
      "ingredients": [
        {"name": str, "amount": float, "unit": str, "category": str}
      ],
      "instructions": [str, str],
      "tags": [str],
      "dietary_info": [str],
      "difficulty": "easy" | "medium" | "hard"
    }
  ]
}
    """
)
