from __future__ import annotations

from typing import Any, Dict, List, Optional

import backend_client

from .schemas import AssignedPlan, MealPlanTemplate


def _template_payload(template: MealPlanTemplate) -> Dict[str, Any]:
    payload = template.model_dump(
        by_alias=True,
        exclude_none=True,
        include={"name", "objective", "description", "meals", "status"},
    )
    for meal in payload.get("meals", []):
        meal.pop("id", None)
        for food in meal.get("foods", []):
            food.pop("id", None)
    return payload


# ===================== COACH =====================


def get_templates() -> List[MealPlanTemplate]:
    data = backend_client.get("/meal-plans")
    return [MealPlanTemplate.model_validate(t) for t in backend_client.unwrap_list(data)]


def get_template(template_id: int) -> MealPlanTemplate:
    return MealPlanTemplate.model_validate(backend_client.get(f"/meal-plans/{template_id}"))


def create_template(template: MealPlanTemplate) -> MealPlanTemplate:
    return MealPlanTemplate.model_validate(backend_client.post("/meal-plans", json=_template_payload(template)))


def update_template(template_id: int, template: MealPlanTemplate) -> MealPlanTemplate:
    return MealPlanTemplate.model_validate(
        backend_client.patch(f"/meal-plans/{template_id}", json=_template_payload(template))
    )


def delete_template(template_id: int) -> None:
    backend_client.delete(f"/meal-plans/{template_id}")


def duplicate_template(template_id: int) -> MealPlanTemplate:
    return MealPlanTemplate.model_validate(backend_client.post(f"/meal-plans/{template_id}/duplicate"))


def flatten_assigned(item: Dict[str, Any]) -> AssignedPlan:
    """Flatten an assignment row with nested template/student into an AssignedPlan."""
    template = item.get("template") or {}
    student = item.get("student")
    student_name = f"{student.get('firstName', '')} {student.get('lastName', '')}" if student else "Alumno"
    return AssignedPlan(
        id=item["id"],
        template_id=item.get("templateId"),
        template_name=template.get("name") or "Plan",
        student_id=item.get("studentId"),
        student_name=student_name,
        is_customized=bool(item.get("customizations")),
        assigned_at=item.get("createdAt"),
    )


def get_assigned_plans() -> List[AssignedPlan]:
    return [flatten_assigned(item) for item in backend_client.unwrap_list(backend_client.get("/meal-plans/assigned"))]


def assign_plan(
    template_id: int,
    student_ids: List[int],
    custom_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """-> {assigned, skipped}"""
    payload: Dict[str, Any] = {"studentIds": student_ids}
    if custom_name:
        payload["customName"] = custom_name
    if notes:
        payload["notes"] = notes
    return backend_client.post(f"/meal-plans/{template_id}/assign", json=payload) or {"assigned": 0, "skipped": 0}


def unassign_plan(template_id: int, student_id: int) -> None:
    backend_client.delete(f"/meal-plans/{template_id}/unassign/{student_id}")


# ===================== STUDENT =====================


def get_my_plans() -> List[Dict[str, Any]]:
    return backend_client.unwrap_list(backend_client.get("/meal-plans/my-plans"))


def get_student_plans(student_id: int) -> List[Dict[str, Any]]:
    return backend_client.unwrap_list(backend_client.get(f"/meal-plans/student/{student_id}"))
