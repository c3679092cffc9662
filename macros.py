from __future__ import annotations

import math
from typing import Dict, Iterable, Optional, Union

from coach_api.schemas import FoodItem, MealPlanFood, MealPlanMeal

Number = Union[int, float]

# goal -> factor applied to maintenance calories
GOALS: Dict[str, Dict[str, object]] = {
    "deficit": {"label": "Bajar peso", "factor": 0.85},
    "maintenance": {"label": "Mantener", "factor": 1.0},
    "surplus": {"label": "Subir peso", "factor": 1.1},
}

DEFAULT_MAINTENANCE = 2000
PROTEIN_PER_KG = 1.8
FAT_PER_KG = 0.8
MIN_CARBS = 100


def js_round(value: Number, digits: int = 0) -> float:
    """Round half up (2.5 -> 3, -2.5 -> -2), unlike Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calories_from_macros(protein: Number, carbs: Number, fat: Number) -> Number:
    return protein * 4 + carbs * 4 + fat * 9


def scale_food(food: FoodItem, grams: float, unit: str = "g") -> MealPlanFood:
    """Turn a per-100g catalog food into a plan entry for ``grams``."""
    factor = (grams or 0) / 100
    return MealPlanFood(
        food_item_id=food.id,
        name=food.name,
        quantity=grams or 0,
        unit=unit,
        calories=int(js_round(food.calories_per_100g * factor)),
        protein=js_round(food.protein_per_100g * factor, 1),
        carbs=js_round(food.carbs_per_100g * factor, 1),
        fat=js_round(food.fat_per_100g * factor, 1),
    )


def _sum_foods(foods: Iterable[MealPlanFood]) -> Dict[str, float]:
    totals = {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fat": 0.0}
    for food in foods:
        totals["calories"] += food.calories or 0
        totals["protein"] += food.protein or 0
        totals["carbs"] += food.carbs or 0
        totals["fat"] += food.fat or 0
    return totals


def meal_totals(meal: MealPlanMeal) -> Dict[str, float]:
    totals = _sum_foods(meal.foods)
    totals["calories"] = js_round(totals["calories"])
    return totals


def plan_totals(meals: Iterable[MealPlanMeal]) -> Dict[str, int]:
    foods = [food for meal in meals for food in meal.foods]
    return {key: int(js_round(value)) for key, value in _sum_foods(foods).items()}


def suggest_targets(maintenance: Optional[float], weight: float, goal: str = "maintenance") -> Dict[str, int]:
    """
    Daily targets from maintenance calories and body weight.

    Protein 1.8 g/kg and fat 0.8 g/kg; carbs fill the remaining calories but
    never drop below 100 g.
    """
    factor = float(GOALS.get(goal, GOALS["maintenance"])["factor"])
    calories = int(js_round((maintenance or DEFAULT_MAINTENANCE) * factor))
    protein = int(js_round(weight * PROTEIN_PER_KG))
    fat = int(js_round(weight * FAT_PER_KG))
    carbs = max(int(js_round((calories - protein * 4 - fat * 9) / 4)), MIN_CARBS)
    return {"calories": calories, "protein": protein, "carbs": carbs, "fat": fat}
