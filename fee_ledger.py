from __future__ import annotations

import calendar
from datetime import date
from itertools import groupby
from typing import Dict, Iterable, List, Optional, Tuple

from coach_api.schemas import Fee
from date_utils import parse_local_date
from exceptions import FormValidationError

PENDING_STATUSES = {"pending", "overdue", "partial"}
PAID_STATUSES = {"paid", "completed"}

STATUS_LABELS: Dict[str, str] = {
    "pending": "Pendiente",
    "paid": "Pagada",
    "completed": "Pagada",
    "overdue": "Vencida",
    "partial": "Pago parcial",
}

PAYMENT_METHODS: Dict[str, str] = {
    "cash": "Efectivo",
    "transfer": "Transferencia",
    "mercadopago": "MercadoPago",
    "other": "Otro",
}

NEXT_MONTH_WINDOW_DAYS = 5


def _first_not_none(*values: Optional[float]) -> float:
    for value in values:
        if value is not None:
            return float(value)
    return 0.0


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, STATUS_LABELS["pending"])


def pending_fees(fees: Iterable[Fee]) -> List[Fee]:
    return [f for f in fees if f.status in PENDING_STATUSES]


def paid_fees(fees: Iterable[Fee]) -> List[Fee]:
    return [f for f in fees if f.status in PAID_STATUSES]


def outstanding_amount(fee: Fee) -> float:
    """remainingAmount, else value, else amount; zero counts as a value."""
    return _first_not_none(fee.remaining_amount, fee.value, fee.amount)


def total_pending(fees: Iterable[Fee]) -> float:
    return sum(outstanding_amount(f) for f in pending_fees(fees))


def is_overdue(fee: Fee, today: Optional[date] = None) -> bool:
    """Overdue by status, by server flag, or by a due date before today."""
    if fee.status == "overdue" or fee.is_overdue:
        return True
    due = parse_local_date(fee.due_date)
    return due is not None and due < (today or date.today())


def fees_to_notify(fees: Iterable[Fee], today: Optional[date] = None) -> List[Fee]:
    today = today or date.today()
    result = []
    for fee in pending_fees(fees):
        due = parse_local_date(fee.due_date)
        if due is not None and due < today:
            result.append(fee)
    return result


def remaining_for(fee: Fee) -> float:
    if fee.remaining_amount:
        return float(fee.remaining_amount)
    return float(fee.value or 0) - float(fee.amount_paid or 0)


def default_payment_amount(fee: Fee) -> float:
    return fee.amount_due - float(fee.amount_paid or 0)


def paid_fees_by_month(fees: Iterable[Fee], months: int = 3) -> List[Tuple[Tuple[int, int], List[Fee]]]:
    """Paid fees grouped by (year, month), most recent first, capped at ``months`` groups."""
    ordered = sorted(paid_fees(fees), key=lambda f: (f.year or 0, f.month or 0), reverse=True)
    grouped = [
        (key, list(group))
        for key, group in groupby(ordered, key=lambda f: (f.year or 0, f.month or 0))
    ]
    return grouped[:months]


def next_month(today: date) -> Tuple[int, int]:
    """(month, year) following ``today``'s month."""
    if today.month == 12:
        return 1, today.year + 1
    return today.month + 1, today.year


next_schedule_month = next_month


def student_visible_fees(fees: Iterable[Fee], today: Optional[date] = None) -> List[Fee]:
    """
    Fees shown to a student: unpaid ones the server flags as overdue or current,
    plus next month's fee once the month is about to end.
    """
    today = today or date.today()
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    show_next = days_in_month - today.day <= NEXT_MONTH_WINDOW_DAYS
    upcoming_month, upcoming_year = next_month(today)

    visible = []
    for fee in fees:
        if fee.status in PAID_STATUSES:
            continue
        if fee.is_overdue or fee.is_current:
            visible.append(fee)
        elif show_next and fee.month == upcoming_month and fee.year == upcoming_year:
            visible.append(fee)
    return visible


def student_total_pending(fees: Iterable[Fee]) -> float:
    return sum(remaining_for(f) for f in fees)


def _parse_amount(text: str) -> Optional[float]:
    try:
        return float(str(text).replace(",", ".").strip())
    except (TypeError, ValueError):
        return None


def validate_payment(amount_text: str, method: Optional[str]) -> Tuple[float, str]:
    amount = _parse_amount(amount_text)
    if amount is None or amount <= 0:
        raise FormValidationError("Ingresá un monto válido", field="amount")
    if not method:
        raise FormValidationError("Seleccioná un método de pago", field="payment_method")
    if method not in PAYMENT_METHODS:
        raise FormValidationError(f"Método de pago desconocido: {method}", field="payment_method")
    return amount, method


def validate_schedule_amount(amount_text: str) -> float:
    amount = _parse_amount(amount_text)
    if amount is None or amount <= 0:
        raise FormValidationError("Ingresá un monto válido", field="amount")
    return amount


def fee_stats(fees: Iterable[Fee], today: Optional[date] = None) -> Dict[str, float]:
    """Counters for the coach header cards."""
    fees = list(fees)
    pending = pending_fees(fees)
    return {
        "pending_count": len(pending),
        "paid_count": len(paid_fees(fees)),
        "overdue_count": sum(1 for f in pending if is_overdue(f, today)),
        "total_pending": total_pending(fees),
        "total_collected": sum(_first_not_none(f.amount_paid, f.paid_amount) for f in paid_fees(fees)),
    }
