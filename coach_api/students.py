from __future__ import annotations

from typing import Any, Dict, List, Optional

import backend_client

from .schemas import Student, StudentPermissions


def get_coach_students(coach_user_id: int, include_inactive: bool = False) -> List[Student]:
    params = {"includeInactive": "true"} if include_inactive else None
    data = backend_client.get(f"/students/coach/{coach_user_id}", params=params)
    return [Student.model_validate(s) for s in backend_client.unwrap_list(data)]


def get_coach_students_summary() -> Dict[str, Any]:
    return backend_client.get("/macrocycle/coach/students-summary") or {}


def get_student(student_id: int) -> Student:
    return Student.model_validate(backend_client.get(f"/students/{student_id}"))


def update_student(student_id: int, updates: Dict[str, Any]) -> Any:
    return backend_client.put(f"/students/{student_id}", json=updates)


def update_student_permissions(student_id: int, permissions: StudentPermissions) -> Any:
    return backend_client.put(f"/students/{student_id}/permissions", json=permissions.to_payload())


def update_student_goals(
    student_id: int,
    daily_steps_goal: Optional[int] = None,
    weekly_weight_goal: Optional[float] = None,
) -> None:
    """Goals live in two services: steps under cardio, weight under health."""
    if daily_steps_goal is not None:
        backend_client.put(f"/cardio/{student_id}/steps-goal", json={"dailyStepsGoal": daily_steps_goal})
    if weekly_weight_goal is not None:
        backend_client.put(f"/health/goals/{student_id}/weight", json={"weeklyWeightGoal": weekly_weight_goal})


def get_recent_activity(coach_user_id: int, limit: int = 10) -> List[Dict[str, Any]]:
    data = backend_client.get(f"/students/coach/{coach_user_id}/recent-activity", params={"limit": limit})
    return backend_client.unwrap_list(data)


def get_student_notes(student_id: int, limit: int = 10) -> List[Dict[str, Any]]:
    data = backend_client.get(f"/set/student/{student_id}/notes", params={"limit": limit})
    return backend_client.unwrap_list(data)
