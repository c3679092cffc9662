from __future__ import annotations

from typing import Any, Dict, List, Optional

import backend_client

from .schemas import CatalogExercise, Macrocycle, MesocycleTemplate, TrainingDay, WorkoutSet


# ========== STUDENT ROUTINE ==========


def get_student_macrocycles(student_id: int) -> List[Macrocycle]:
    data = backend_client.get(f"/macrocycle/student/{student_id}")
    return [Macrocycle.model_validate(m) for m in backend_client.unwrap_list(data)]


def get_macrocycle(macrocycle_id: int) -> Macrocycle:
    return Macrocycle.model_validate(backend_client.get(f"/macrocycle/{macrocycle_id}"))


def get_day(day_id: int) -> TrainingDay:
    return TrainingDay.model_validate(backend_client.get(f"/day/{day_id}"))


def update_set(set_id: int, updates: Dict[str, Any]) -> WorkoutSet:
    return WorkoutSet.model_validate(backend_client.patch(f"/set/{set_id}", json=updates))


def add_extra_set(exercise_id: int, payload: Dict[str, Any]) -> WorkoutSet:
    return WorkoutSet.model_validate(backend_client.post(f"/set/{exercise_id}", json=payload))


def reorder_exercises(items: List[Dict[str, int]]) -> Any:
    """Persist a new exercise order: items are {id, orden} with 1-based orden."""
    return backend_client.patch("/exercise/reorder", json={"exercises": items})


def get_exercise_history(student_id: int, catalog_id: int) -> List[Dict[str, Any]]:
    data = backend_client.get(f"/macrocycle/exercise-history/{student_id}/{catalog_id}")
    return backend_client.unwrap_list(data)


def get_training_history(student_id: int, limit: int = 20) -> List[Dict[str, Any]]:
    return backend_client.unwrap_list(backend_client.get(f"/macrocycle/history/{student_id}", params={"limit": limit}))


# ========== TEMPLATES ==========


def get_mesocycle_templates() -> List[MesocycleTemplate]:
    data = backend_client.get("/templates/mesocycles")
    return [MesocycleTemplate.model_validate(t) for t in backend_client.unwrap_list(data)]


def get_mesocycle_template(template_id: str) -> MesocycleTemplate:
    return MesocycleTemplate.model_validate(backend_client.get(f"/templates/mesocycles/{template_id}"))


def delete_mesocycle_template(template_id: str) -> None:
    backend_client.delete(f"/templates/mesocycles/{template_id}")


def publish_mesocycle_template(template_id: str) -> MesocycleTemplate:
    return MesocycleTemplate.model_validate(backend_client.post(f"/templates/mesocycles/{template_id}/publish"))


# ========== EXERCISE CATALOG ==========


def get_exercise_catalog(muscle_group: Optional[str] = None, search: Optional[str] = None) -> List[CatalogExercise]:
    data = backend_client.get("/exercise-catalog", params={"muscleGroup": muscle_group, "search": search})
    return [CatalogExercise.model_validate(e) for e in backend_client.unwrap_list(data)]


def get_muscle_groups() -> List[str]:
    return [str(g) for g in backend_client.unwrap_list(backend_client.get("/exercise-catalog/muscle-groups"))]
