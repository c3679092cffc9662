"""
Tests for macro math used by the catalog and the meal-plan builder.
"""
import pytest

import macros
from coach_api.schemas import FoodItem, MealPlanFood, MealPlanMeal


@pytest.mark.parametrize("p, c, f", [(0, 0, 0), (10, 20, 5), (31.5, 0, 2.2)])
def test_calories_from_macros_is_exact(p, c, f):
    assert macros.calories_from_macros(p, c, f) == 4 * p + 4 * c + 9 * f


def test_js_round_half_up():
    assert macros.js_round(2.5) == 3
    assert macros.js_round(-2.5) == -2
    assert macros.js_round(1.25, 1) == 1.3
    assert macros.js_round(6.17, 1) == 6.2


def test_scale_food():
    """Calories to the unit, macros to one decimal."""
    food = FoodItem(
        id=9, name="Pollo", protein_per_100g=20, carbs_per_100g=10, fat_per_100g=5, calories_per_100g=165
    )
    scaled = macros.scale_food(food, 150)
    assert scaled.food_item_id == 9
    assert scaled.quantity == 150
    assert scaled.calories == 248
    assert scaled.protein == 30.0
    assert scaled.carbs == 15.0
    assert scaled.fat == 7.5


def test_scale_food_from_wire_payload():
    food = FoodItem.model_validate(
        {"id": 1, "name": "Arroz", "proteinPer100g": 12.34, "carbsPer100g": 0, "fatPer100g": 0, "caloriesPer100g": 49}
    )
    scaled = macros.scale_food(food, 50)
    assert scaled.protein == 6.2
    assert scaled.calories == 25


def test_plan_totals_rounds_sums():
    meals = [
        MealPlanMeal(name="Desayuno", foods=[MealPlanFood(name="a", calories=100, protein=10.4, carbs=5.2, fat=1.1)]),
        MealPlanMeal(name="Cena", foods=[MealPlanFood(name="b", calories=250, protein=20.2, carbs=30.4, fat=9.5)]),
    ]
    assert macros.plan_totals(meals) == {"calories": 350, "protein": 31, "carbs": 36, "fat": 11}


def test_meal_totals_empty_meal():
    assert macros.meal_totals(MealPlanMeal(name="Merienda"))["calories"] == 0


def test_suggest_targets_deficit():
    assert macros.suggest_targets(2000, 70, "deficit") == {"calories": 1700, "protein": 126, "carbs": 173, "fat": 56}


def test_suggest_targets_carbs_floor_and_default_maintenance():
    targets = macros.suggest_targets(None, 100, "deficit")
    assert targets["calories"] == 1700
    assert targets["carbs"] == macros.MIN_CARBS


def test_suggest_targets_unknown_goal_is_maintenance():
    assert macros.suggest_targets(2500, 80, "bulk")["calories"] == 2500
