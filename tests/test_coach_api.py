"""
Tests for the REST wrappers, run against the fake_api request table.
"""
from datetime import date

import pytest

import backend_client
from coach_api import auth, cardio, fees, health, meal_plans, nutrition, routine, students
from coach_api.schemas import FoodItem, MealPlanFood, MealPlanMeal, MealPlanTemplate
from exceptions import ApiError, UnauthorizedError


@pytest.fixture
def no_token(monkeypatch):
    monkeypatch.setattr(backend_client, "_token_provider", None)
    monkeypatch.setattr(backend_client, "_env_token", None)
    monkeypatch.setattr(backend_client, "API_EMAIL", None)


# Auth


def test_login_returns_the_token_without_sharing_it(fake_api, no_token):
    fake_api.respond(
        "POST",
        "/auth/login",
        {
            "token": "abc",
            "id": 1,
            "email": "ana@gmail.com",
            "userType": "student",
            "profiles": {"student": {"id": 3, "firstName": "Ana"}},
        },
    )
    session = auth.login("ana@gmail.com", "secret")
    assert fake_api.last["json"] == {"email": "ana@gmail.com", "password": "secret"}
    assert session.user_type == "student"
    assert session.student.id == 3
    assert session.token == "abc"
    assert backend_client.get_token() is None


def test_check_status_propagates_expired_token(fake_api, no_token):
    fake_api.respond("GET", "/auth/check-status", UnauthorizedError("expired"))
    with pytest.raises(UnauthorizedError):
        auth.check_status("old")
    assert fake_api.last["token"] == "old"


def test_me_uses_the_callers_token(fake_api, no_token):
    backend_client.set_token_provider(lambda: "tok")
    fake_api.respond("GET", "/auth/check-status", {"id": 5, "email": "c@x.com", "userType": "coach"})
    session = auth.me()
    assert fake_api.last["token"] == "tok"
    assert session.token == "tok"
    assert session.user_type == "coach"


@pytest.mark.parametrize(
    "roles, has_student, expected",
    [
        (["superadmin", "coach"], False, "superadmin"),
        (["coach"], True, "coach"),
        (["user"], True, "student"),
        (["user"], False, None),
    ],
)
def test_user_type_from_roles(roles, has_student, expected):
    payload = {"id": 1, "email": "x@y.com", "roles": [{"id": i, "name": r} for i, r in enumerate(roles)]}
    if has_student:
        payload["profiles"] = {"student": {"id": 9}}
    assert auth.session_from_payload(payload).user_type == expected


def test_multiple_profiles_leave_user_type_open():
    session = auth.session_from_payload(
        {
            "id": 1,
            "email": "x@y.com",
            "userType": "coach",
            "hasMultipleProfiles": True,
            "profiles": {"coach": {"id": 2}, "student": {"id": 9}},
        }
    )
    assert session.has_multiple_profiles
    assert session.user_type is None
    assert session.coach.id == 2 and session.student.id == 9


def test_register_defaults_to_student(fake_api, no_token):
    fake_api.respond("POST", "/auth/register", {"token": "new", "user": {"id": 4, "email": "ana@gmail.com"}})
    session = auth.register("ana@gmail.com", "secret", "Ana Pérez")
    assert fake_api.last["json"]["fullName"] == "Ana Pérez"
    assert session.user_type == "student"
    assert session.user.id == 4


# Fees


def test_create_payment_sends_amount_paid(fake_api):
    fees.create_payment(10, 3, 15000, "transfer", today=date(2026, 1, 8))
    assert fake_api.last["path"] == "/payments"
    assert fake_api.last["json"] == {
        "feeId": 10,
        "studentId": 3,
        "amountPaid": 15000,
        "paymentMethod": "transfer",
        "paymentDate": "2026-01-08",
    }


def test_coach_fees_accepts_bare_list(fake_api):
    fake_api.respond("GET", "/fee/coach/my-students-fees", [{"id": 1, "value": 100}])
    overview = fees.get_coach_fees_with_stats()
    assert [f.id for f in overview.fees] == [1]
    assert overview.statistics == {}


def test_student_fees_with_coach(fake_api):
    fake_api.respond(
        "GET",
        "/fee/my-fees/3",
        {"fees": [{"id": 1, "amount": 100}], "coach": {"id": 2, "paymentAlias": "coach.mp"}},
    )
    fee_list, coach = fees.get_student_fees_with_coach(3)
    assert fee_list[0].amount_due == 100
    assert coach.payment_alias == "coach.mp"


def test_plan_prices_are_optional(fake_api):
    fake_api.respond("GET", "/fee/coach/plan-prices", ApiError("not deployed"))
    assert fees.get_plan_prices() == []


# Health and cardio lookups


def test_weight_by_date_matches_day_part(fake_api):
    fake_api.respond(
        "GET",
        "/health/weight/3",
        [{"id": 7, "date": "2026-01-08T03:00:00.000Z", "weight": "80.4"}, {"id": 6, "date": "2026-01-07", "weight": 81}],
    )
    assert health.get_weight_by_date(3, "2026-01-08") == {"weight": 80.4, "id": 7}
    assert health.get_weight_by_date(3, "2026-01-01") is None


def test_weight_by_date_is_none_on_error(fake_api):
    fake_api.respond("GET", "/health/weight/3", ApiError("down"))
    assert health.get_weight_by_date(3, "2026-01-08") is None


def test_steps_by_date_only_walk_logs(fake_api):
    fake_api.respond(
        "GET",
        "/cardio/3",
        {"value": [
            {"id": 1, "date": "2026-01-08", "activityType": "running", "steps": 3000},
            {"id": 2, "date": "2026-01-08T10:00:00Z", "activityType": "walk", "steps": 9000},
        ]},
    )
    assert cardio.get_steps_by_date(3, "2026-01-08") == {"steps": 9000, "id": 2}


def test_monthly_steps_is_empty_on_error(fake_api):
    fake_api.respond("GET", "/cardio/3", ApiError("down"))
    assert cardio.get_monthly_steps(3, 2026, 1) == []


def test_monthly_steps_queries_the_month(fake_api):
    fake_api.respond("GET", "/cardio/3", [{"id": 1, "date": "2026-02-03", "activityType": "walk", "steps": 500}])
    assert cardio.get_monthly_steps(3, 2026, 2) == [{"date": "2026-02-03", "steps": 500, "id": 1}]
    assert fake_api.last["params"] == {"startDate": "2026-02-01", "endDate": "2026-02-28", "limit": 100}


def test_manual_steps_replace_flag(fake_api):
    cardio.add_manual_steps(3, 8000, day="2026-01-08", replace=True)
    assert fake_api.last["json"] == {"steps": 8000, "date": "2026-01-08", "replace": True}
    cardio.add_manual_steps(3, 8000, day="2026-01-08")
    assert "replace" not in fake_api.last["json"]


def test_anthropometry_history_newest_first(fake_api):
    fake_api.respond(
        "GET",
        "/health/anthropometry/3",
        [{"id": 1, "date": "2026-01-01"}, {"id": 2, "date": "2026-03-01"}, {"id": 3, "date": "2026-02-01"}],
    )
    assert [a.id for a in health.get_anthropometry_history(3)] == [2, 3, 1]


# Students


def test_update_student_goals_hits_both_services(fake_api):
    students.update_student_goals(3, daily_steps_goal=9000, weekly_weight_goal=-0.5)
    assert [(c["method"], c["path"]) for c in fake_api.calls] == [
        ("PUT", "/cardio/3/steps-goal"),
        ("PUT", "/health/goals/3/weight"),
    ]
    assert fake_api.calls[1]["json"] == {"weeklyWeightGoal": -0.5}


def test_update_student_goals_skips_missing(fake_api):
    students.update_student_goals(3, daily_steps_goal=9000)
    assert len(fake_api.calls) == 1


# Nutrition


def test_build_profile_payload():
    payload = nutrition.build_profile_payload(
        {"sex": "F", "age": 30, "targetCalories": 1800, "targetProteinGrams": 120, "targetProtein": 90, "unknown": 1}
    )
    assert payload == {"sex": "F", "age": 30, "targetProteinGrams": 120, "targetDailyCalories": 1800}


def test_meal_types_sorted_by_display_order(fake_api):
    fake_api.respond(
        "GET",
        "/nutrition/meal-types/3",
        [{"id": 1, "name": "Cena", "displayOrder": 4}, {"id": 2, "name": "Desayuno", "displayOrder": 1}],
    )
    assert [m.name for m in nutrition.get_meal_types(3)] == ["Desayuno", "Cena"]


def test_catalog_payload_drops_server_fields(fake_api):
    fake_api.respond("POST", "/nutrition/coach/foods", {"id": 5, "name": "Avena"})
    food = FoodItem(id=99, name="Avena", protein_per_100g=13, calories_per_100g=380, coach_id=2)
    created = nutrition.create_coach_food_item(food)
    sent = fake_api.last["json"]
    assert created.id == 5
    assert sent["proteinPer100g"] == 13
    for key in ("id", "caloriesPer100g", "coachId"):
        assert key not in sent


def test_daily_food_log_defaults_date(fake_api):
    log = nutrition.get_daily_food_log(3, "2026-01-08")
    assert fake_api.last["params"] == {"date": "2026-01-08"}
    assert log.date == "2026-01-08"
    assert log.entries == []


# Meal plans and routine


def test_flatten_assigned():
    plan = meal_plans.flatten_assigned(
        {
            "id": 1,
            "templateId": 4,
            "template": {"name": "Definición"},
            "studentId": 3,
            "student": {"firstName": "Ana", "lastName": "Pérez"},
            "customizations": {"meals": []},
            "createdAt": "2026-01-02",
        }
    )
    assert plan.template_name == "Definición"
    assert plan.student_name == "Ana Pérez"
    assert plan.is_customized is True

    bare = meal_plans.flatten_assigned({"id": 2})
    assert bare.template_name == "Plan"
    assert bare.student_name == "Alumno"


def test_template_payload_drops_ids(fake_api):
    fake_api.respond("POST", "/meal-plans", {"id": 8, "name": "Volumen"})
    template = MealPlanTemplate(
        id=3,
        name="Volumen",
        meals=[MealPlanMeal(id=1, name="Desayuno", foods=[MealPlanFood(id=2, name="Avena", quantity=50)])],
    )
    meal_plans.create_template(template)
    sent = fake_api.last["json"]
    assert "id" not in sent
    assert "id" not in sent["meals"][0]
    assert sent["meals"][0]["foods"][0] == {
        "name": "Avena",
        "quantity": 50,
        "unit": "g",
        "calories": 0,
        "protein": 0,
        "carbs": 0,
        "fat": 0,
    }


def test_reorder_exercises_payload(fake_api):
    routine.reorder_exercises([{"id": 5, "orden": 1}, {"id": 4, "orden": 2}])
    assert fake_api.last["method"] == "PATCH"
    assert fake_api.last["json"] == {"exercises": [{"id": 5, "orden": 1}, {"id": 4, "orden": 2}]}
