"""
Tests for the API models: wire aliases and derived properties.
"""
import pytest
from pydantic import ValidationError

from coach_api.schemas import (
    CatalogExercise,
    Exercise,
    Fee,
    FoodItem,
    LoginForm,
    SleepLog,
    Student,
)


def test_student_from_wire():
    student = Student.model_validate(
        {
            "id": 3,
            "firstName": "Ana",
            "lastName": "Pérez",
            "dailyStepsGoal": 9000,
            "permissions": {"canAccessRoutine": False},
            "somethingNew": True,
        }
    )
    assert student.full_name == "Ana Pérez"
    assert student.daily_steps_goal == 9000
    assert student.permissions.can_access_routine is False
    assert student.permissions.can_access_nutrition is True


def test_student_permissions_default_to_allowed():
    assert Student(id=1).permissions.can_access_progress is True


def test_fee_amount_due_prefers_value():
    assert Fee(id=1, value=0, amount=5000).amount_due == 0
    assert Fee(id=1, amount=5000).amount_due == 5000
    assert Fee(id=1).amount_due == 0.0


def test_food_item_per_100g_aliases():
    food = FoodItem.model_validate({"name": "Arroz", "carbsPer100g": 28, "caloriesPer100g": 130})
    assert food.carbs_per_100g == 28
    payload = food.to_payload()
    assert payload["caloriesPer100g"] == 130
    assert payload["portionGrams"] == 100
    assert "id" not in payload


def test_numbers_become_strings_where_text_is_expected():
    log = SleepLog.model_validate({"id": 1, "date": "2026-01-08", "sleepHours": 7, "quality": "PLENO"})
    assert log.sleep_hours == 7
    ex = Exercise.model_validate({"id": 1, "repeticiones": 10, "descanso": 2})
    assert ex.repeticiones == "10"
    assert ex.descanso == "2"


def test_exercise_display_name():
    assert Exercise(id=1, orden=2).display_name == "Ejercicio 2"
    named = Exercise(id=1, exercise_catalog=CatalogExercise(id=4, name="Sentadilla"))
    assert named.display_name == "Sentadilla"


def test_login_form_checks_email():
    assert LoginForm(email="ana@gmail.com", password="x").email == "ana@gmail.com"
    with pytest.raises(ValidationError):
        LoginForm(email="not-an-email", password="x")
    with pytest.raises(ValidationError):
        LoginForm(email="ana@gmail.com", password="")
