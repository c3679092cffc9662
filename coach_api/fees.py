from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import backend_client
from exceptions import ApiError

from .schemas import Coach, CoachFeesOverview, Fee, Payment, PlanPrice, PriceSchedule

logger = logging.getLogger("fitcoach.fees")


# ========== COACH ==========


def get_coach_fees_with_stats() -> CoachFeesOverview:
    """GET /fee/coach/my-students-fees -> {coach, fees, statistics, period}"""
    data = backend_client.get("/fee/coach/my-students-fees") or {}
    if isinstance(data, list):
        data = {"fees": data}
    return CoachFeesOverview.model_validate(data)


def get_coach_fees() -> List[Fee]:
    return get_coach_fees_with_stats().fees


def create_payment(
    fee_id: int,
    student_id: int,
    amount: float,
    payment_method: str,
    reference: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Register a payment; the backend expects the amount as amountPaid."""
    payload = {
        "feeId": fee_id,
        "studentId": student_id,
        "amountPaid": amount,
        "paymentMethod": payment_method,
        "paymentDate": (today or date.today()).isoformat(),
    }
    if reference:
        payload["reference"] = reference
    return backend_client.post("/payments", json=payload) or {}


def notify_overdue_fees() -> Dict[str, Any]:
    """POST /fee/coach/notify-overdue -> {success, message, notified, details}"""
    return backend_client.post("/fee/coach/notify-overdue") or {"notified": 0, "message": ""}


def apply_increases() -> Dict[str, Any]:
    return backend_client.post("/fee/coach/apply-increases") or {}


def generate_future_fees() -> Dict[str, Any]:
    return backend_client.post("/fee/coach/generate-future-fees") or {}


# ========== PRICE SCHEDULES ==========


def get_price_schedules() -> List[PriceSchedule]:
    data = backend_client.get("/fee/price-schedule") or {}
    schedules = data.get("schedules", []) if isinstance(data, dict) else data
    return [PriceSchedule.model_validate(s) for s in schedules or []]


def get_plan_prices() -> List[PlanPrice]:
    """Plan prices are optional; a failing endpoint just means no plan picker."""
    try:
        data = backend_client.get("/fee/coach/plan-prices")
    except ApiError as exc:
        logger.warning("Plan prices unavailable: %s", exc)
        return []
    return [PlanPrice.model_validate(p) for p in backend_client.unwrap_list(data)]


def create_price_schedule(
    effective_month: int,
    effective_year: int,
    amount: float,
    sport_plan_id: Optional[int] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "effectiveMonth": effective_month,
        "effectiveYear": effective_year,
        "amount": amount,
    }
    if sport_plan_id is not None:
        payload["sportPlanId"] = sport_plan_id
    return backend_client.post("/fee/price-schedule", json=payload) or {}


def cancel_price_schedule(schedule_id: int) -> None:
    backend_client.delete(f"/fee/price-schedule/{schedule_id}")


# ========== STUDENT ==========


def get_student_fees_with_coach(student_id: int) -> Tuple[List[Fee], Optional[Coach]]:
    """GET /fee/my-fees/:id -> {student, coach, summary, fees}"""
    data = backend_client.get(f"/fee/my-fees/{student_id}") or {}
    fees = [Fee.model_validate(f) for f in data.get("fees") or []]
    coach_raw = data.get("coach")
    coach = Coach.model_validate(coach_raw) if coach_raw else None
    return fees, coach


def get_student_fees(student_id: int) -> List[Fee]:
    return get_student_fees_with_coach(student_id)[0]


def get_payment_history() -> List[Payment]:
    """The history endpoint is not deployed everywhere; treat failures as empty."""
    try:
        data = backend_client.get("/payments/my-history")
    except ApiError as exc:
        logger.info("Payment history unavailable: %s", exc)
        return []
    return [Payment.model_validate(p) for p in backend_client.unwrap_list(data)]
