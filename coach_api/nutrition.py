from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import backend_client

from .schemas import DailyFoodLog, FoodCategory, FoodItem, MealType, NutritionProfile

# keys the profile endpoint accepts; anything else is rejected by the backend
PROFILE_KEYS = (
    "sex",
    "age",
    "currentWeight",
    "heightCm",
    "bodyFatPercentage",
    "trainingDaysPerWeek",
    "activityFactor",
    "targetDailyCalories",
    "targetProteinGrams",
    "targetCarbsGrams",
    "targetFatGrams",
    "notes",
)

# short aliases some forms still send
_PROFILE_ALIASES = {
    "targetCalories": "targetDailyCalories",
    "targetProtein": "targetProteinGrams",
    "targetCarbs": "targetCarbsGrams",
    "targetFat": "targetFatGrams",
}


# ========== PROFILE ==========


def get_nutrition_profile(student_id: int) -> Optional[NutritionProfile]:
    data = backend_client.get(f"/nutrition/profile/{student_id}")
    if not data:
        return None
    return NutritionProfile.model_validate(data)


def build_profile_payload(profile: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the accepted keys, resolving the short target aliases."""
    payload: Dict[str, Any] = {}
    for key in PROFILE_KEYS:
        if profile.get(key) is not None:
            payload[key] = profile[key]
    for alias, key in _PROFILE_ALIASES.items():
        if not payload.get(key) and profile.get(alias):
            payload[key] = profile[alias]
    return payload


def update_nutrition_profile(student_id: int, profile: Dict[str, Any]) -> Dict[str, Any]:
    return backend_client.post(f"/nutrition/profile/{student_id}", json=build_profile_payload(profile)) or {}


def calculate_calories(
    weight: float,
    height_cm: float,
    age: int,
    sex: str,
    activity_factor: float,
    training_days_per_week: int,
) -> Dict[str, Any]:
    """Server-side BMR/maintenance estimate -> {tmb, maintenance, ...}"""
    return backend_client.post(
        "/nutrition/profile/calculate-calories",
        json={
            "weight": weight,
            "heightCm": height_cm,
            "age": age,
            "sex": sex,
            "activityFactor": activity_factor,
            "trainingDaysPerWeek": training_days_per_week,
        },
    ) or {}


# ========== FOOD LOGS ==========


def get_daily_food_log(student_id: int, day: Optional[str] = None) -> DailyFoodLog:
    day = day or date.today().isoformat()
    data = backend_client.get(f"/nutrition/log/{student_id}", params={"date": day}) or {}
    log = DailyFoodLog.model_validate(data)
    if not log.date:
        log.date = day
    return log


def add_food_log(
    student_id: int,
    quantity_grams: float,
    food_item_id: Optional[int] = None,
    recipe_id: Optional[int] = None,
    meal_type_id: Optional[int] = None,
    day: Optional[str] = None,
) -> Dict[str, Any]:
    return backend_client.post(
        f"/nutrition/log/{student_id}",
        json={
            "foodItemId": food_item_id,
            "recipeId": recipe_id,
            "quantityGrams": quantity_grams,
            "mealTypeId": meal_type_id,
            "date": day or date.today().isoformat(),
        },
    ) or {}


def delete_food_log(log_id: int) -> None:
    backend_client.delete(f"/nutrition/log/{log_id}")


# ========== FOOD ITEMS ==========


def search_foods(student_id: int, query: str) -> List[FoodItem]:
    data = backend_client.get(f"/nutrition/foods/{student_id}", params={"search": query})
    return [FoodItem.model_validate(f) for f in backend_client.unwrap_list(data)]


def create_food_item(student_id: int, food: FoodItem) -> FoodItem:
    return FoodItem.model_validate(backend_client.post(f"/nutrition/foods/{student_id}", json=food.to_payload()))


def get_meal_types(student_id: int) -> List[MealType]:
    data = backend_client.get(f"/nutrition/meal-types/{student_id}")
    return sorted(
        (MealType.model_validate(m) for m in backend_client.unwrap_list(data)),
        key=lambda m: m.display_order,
    )


# ========== RECIPES ==========


def get_recipes(student_id: int) -> List[Dict[str, Any]]:
    return backend_client.unwrap_list(backend_client.get(f"/nutrition/recipes/{student_id}"))


def create_recipe(student_id: int, name: str, ingredients: List[Dict[str, Any]], description: str = "") -> Dict[str, Any]:
    return backend_client.post(
        f"/nutrition/recipes/{student_id}",
        json={"name": name, "description": description or None, "ingredients": ingredients},
    ) or {}


# ========== DASHBOARDS ==========


def get_weekly_summary(student_id: int, week_start: Optional[str] = None) -> Dict[str, Any]:
    params = {"weekStart": week_start} if week_start else None
    return backend_client.get(f"/nutrition/weekly/{student_id}", params=params) or {}


def get_calories_weekly_stats(student_id: int, weeks: int = 12) -> Dict[str, Any]:
    return backend_client.get(f"/nutrition/stats/{student_id}/weekly-stats", params={"weeks": weeks}) or {}


# ========== COACH FOOD CATALOG ==========


def get_coach_food_items(search: Optional[str] = None, category: Optional[str] = None) -> List[FoodItem]:
    data = backend_client.get("/nutrition/coach/foods", params={"category": category or None, "search": search or None})
    return [FoodItem.model_validate(f) for f in backend_client.unwrap_list(data)]


def get_categories() -> List[FoodCategory]:
    return [FoodCategory.model_validate(c) for c in backend_client.unwrap_list(backend_client.get("/nutrition/categories"))]


def _catalog_payload(food: FoodItem) -> Dict[str, Any]:
    payload = food.to_payload()
    for key in ("id", "caloriesPer100g", "studentId", "coachId", "studentName"):
        payload.pop(key, None)
    return payload


def create_coach_food_item(food: FoodItem) -> FoodItem:
    return FoodItem.model_validate(backend_client.post("/nutrition/coach/foods", json=_catalog_payload(food)))


def update_coach_food_item(food_id: int, food: FoodItem) -> FoodItem:
    return FoodItem.model_validate(backend_client.put(f"/nutrition/coach/foods/{food_id}", json=_catalog_payload(food)))


def delete_coach_food_item(food_id: int) -> None:
    backend_client.delete(f"/nutrition/coach/foods/{food_id}")


def initialize_coach_catalog() -> Dict[str, Any]:
    """Seed the coach's catalog with the platform defaults -> {created, message}"""
    return backend_client.post("/nutrition/coach/foods/initialize") or {}


def get_student_custom_foods() -> Dict[str, Any]:
    """Foods created by the coach's students -> {foods, byStudent}"""
    data = backend_client.get("/nutrition/coach/student-foods") or {}
    return {
        "foods": [FoodItem.model_validate(f) for f in data.get("foods") or []],
        "by_student": [
            {
                "student_id": group.get("studentId"),
                "student_name": group.get("studentName", ""),
                "foods": [FoodItem.model_validate(f) for f in group.get("foods") or []],
            }
            for group in data.get("byStudent") or []
        ],
    }
