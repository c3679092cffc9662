"""
Coach workspace pages.

Every page follows the same loop: fetch through coach_api, render, act, then
drop the affected cache entry so the next rerun shows fresh data.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

import fee_ledger
import macros
import measurements
from coach_api import fees as fees_api
from coach_api import health as health_api
from coach_api import meal_plans as meal_plans_api
from coach_api import nutrition as nutrition_api
from coach_api import students as students_api
from coach_api.schemas import (
    Anthropometry,
    Fee,
    FoodItem,
    MealPlanMeal,
    MealPlanTemplate,
    Student,
    StudentPermissions,
)
from date_utils import format_date, month_name
from day_cache import FEES_TTL_SECONDS, STUDENTS_SUMMARY_TTL_SECONDS, WEIGHT_TTL_SECONDS, TTLCache
from exceptions import ApiError, FormValidationError

logger = logging.getLogger("fitcoach.coach")

MEAL_ICONS = ["🍳", "🥗", "🍽️", "🍎", "🥤", "🌙"]
DEFAULT_MEALS = [("Desayuno", "🍳"), ("Almuerzo", "🥗"), ("Merienda", "🍎"), ("Cena", "🌙")]
PLAN_OBJECTIVES = {"deficit": "Déficit calórico", "maintenance": "Mantenimiento", "surplus": "Superávit"}


def _cache(name: str, ttl: float) -> TTLCache:
    key = f"coach_cache_{name}"
    if key not in st.session_state:
        st.session_state[key] = TTLCache(ttl)
    return st.session_state[key]


def _money(value: Optional[float]) -> str:
    return f"${(value or 0):,.0f}".replace(",", ".")


def _api_error(action: str, exc: ApiError) -> None:
    logger.warning("%s failed: %s", action, exc.message)
    st.error(f"{action}: {exc.message}")


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------


def load_students(coach_user_id: int) -> List[Student]:
    cache = _cache("students", STUDENTS_SUMMARY_TTL_SECONDS)
    try:
        return cache.get_or_fetch(coach_user_id, lambda: students_api.get_coach_students(coach_user_id))
    except ApiError as exc:
        _api_error("Error al cargar alumnos", exc)
        return []


def select_student(students: List[Student], key: str = "coach_selected_student") -> Optional[Student]:
    if not students:
        st.info("Todavía no tenés alumnos asignados.")
        return None
    by_label = {f"{s.full_name} (#{s.id})": s for s in students}
    label = st.selectbox("Alumno", list(by_label), key=key)
    return by_label[label]


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


@st.dialog("Registrar pago")
def _payment_dialog(fee: Fee) -> None:
    st.write(f"**{fee.student_name or 'Alumno'}** · {fee.month_name or month_name(fee.month or 0)} {fee.year or ''}")
    st.caption(f"Monto de la cuota: {_money(fee.amount_due)} · Pagado: {_money(fee.amount_paid)}")
    amount_text = st.text_input("Monto", value=f"{fee_ledger.default_payment_amount(fee):.0f}")
    method = st.selectbox(
        "Método de pago",
        options=[None, *fee_ledger.PAYMENT_METHODS],
        format_func=lambda m: "Seleccioná un método" if m is None else fee_ledger.PAYMENT_METHODS[m],
    )
    reference = st.text_input("Referencia (opcional)")
    if st.button("Confirmar pago", type="primary"):
        try:
            amount, method = fee_ledger.validate_payment(amount_text, method)
            fees_api.create_payment(fee.id, fee.student_id, amount, method, reference or None)
        except FormValidationError as exc:
            st.error(exc.message)
            return
        except ApiError as exc:
            _api_error("Error al registrar el pago", exc)
            return
        logger.info("Payment of %s registered for fee %s", amount, fee.id)
        _cache("fees", FEES_TTL_SECONDS).clear()
        st.toast("Pago registrado")
        st.rerun()


def _render_pending_fees(fee_list: List[Fee], today: date) -> None:
    pending = fee_ledger.pending_fees(fee_list)
    if not pending:
        st.success("No hay cuotas pendientes.")
        return
    for fee in sorted(pending, key=lambda f: f.due_date or ""):
        overdue = fee_ledger.is_overdue(fee, today)
        with st.container(border=True):
            left, middle, right = st.columns([3, 2, 1])
            with left:
                st.markdown(f"**{fee.student_name or 'Alumno'}**")
                st.caption(
                    f"{fee.month_name or month_name(fee.month or 0)} {fee.year or ''}"
                    f" · vence {format_date(fee.due_date)}"
                )
            with middle:
                st.markdown(f"**{_money(fee_ledger.outstanding_amount(fee))}**")
                label = fee_ledger.status_label("overdue" if overdue else fee.status)
                st.caption(f"{'🔴' if overdue else '🟡'} {label}")
            with right:
                if st.button("Cobrar", key=f"pay_{fee.id}"):
                    _payment_dialog(fee)


def _render_paid_fees(fee_list: List[Fee]) -> None:
    groups = fee_ledger.paid_fees_by_month(fee_list)
    if not groups:
        st.info("Todavía no hay cuotas pagadas.")
        return
    for (year, month), group in groups:
        st.markdown(f"**{month_name(month).capitalize()} {year}** · {len(group)} pagos")
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Alumno": f.student_name,
                        "Monto": f.amount_paid if f.amount_paid is not None else f.amount_due,
                        "Pagada": format_date(f.paid_date),
                    }
                    for f in group
                ]
            ),
            hide_index=True,
            width="stretch",
        )


def _render_price_schedules(today: date) -> None:
    try:
        schedules = fees_api.get_price_schedules()
    except ApiError as exc:
        _api_error("Error al cargar aumentos", exc)
        schedules = []
    plans = fees_api.get_plan_prices()

    if schedules:
        for schedule in schedules:
            cols = st.columns([3, 2, 1])
            plan_name = schedule.sport_plan.name if schedule.sport_plan else "Todos los planes"
            cols[0].write(f"{month_name(schedule.effective_month).capitalize()} {schedule.effective_year} · {plan_name}")
            cols[1].write(_money(schedule.amount))
            if cols[2].button("Cancelar", key=f"cancel_schedule_{schedule.id}"):
                try:
                    fees_api.cancel_price_schedule(schedule.id)
                    st.toast("Aumento cancelado")
                    st.rerun()
                except ApiError as exc:
                    _api_error("Error al cancelar aumento", exc)
    else:
        st.caption("No hay aumentos programados.")

    default_month, default_year = fee_ledger.next_schedule_month(today)
    with st.form("new_price_schedule", clear_on_submit=True):
        st.markdown("**Programar aumento**")
        col1, col2, col3 = st.columns(3)
        month = col1.selectbox(
            "Mes", list(range(1, 13)), index=default_month - 1, format_func=lambda m: month_name(m).capitalize()
        )
        year = col2.selectbox("Año", [today.year + i for i in range(3)], index=0 if default_year == today.year else 1)
        amount_text = col3.text_input("Nuevo monto")
        plan_options = {None: "Todos los planes", **{p.id: p.name for p in plans}}
        plan_id = st.selectbox("Plan", list(plan_options), format_func=lambda p: plan_options[p])
        if st.form_submit_button("Programar"):
            try:
                amount = fee_ledger.validate_schedule_amount(amount_text)
                fees_api.create_price_schedule(month, year, amount, sport_plan_id=plan_id)
                st.toast("Aumento programado")
                st.rerun()
            except FormValidationError as exc:
                st.error(exc.message)
            except ApiError as exc:
                _api_error("Error al programar aumento", exc)

    col1, col2 = st.columns(2)
    if col1.button("Aplicar aumentos vigentes"):
        try:
            result = fees_api.apply_increases()
            st.toast(result.get("message") or "Aumentos aplicados")
            _cache("fees", FEES_TTL_SECONDS).clear()
        except ApiError as exc:
            _api_error("Error al aplicar aumentos", exc)
    if col2.button("Generar cuotas futuras"):
        try:
            result = fees_api.generate_future_fees()
            st.toast(result.get("message") or "Cuotas generadas")
            _cache("fees", FEES_TTL_SECONDS).clear()
        except ApiError as exc:
            _api_error("Error al generar cuotas", exc)


def render_fees(today: Optional[date] = None) -> None:
    today = today or date.today()
    st.header("Cuotas")
    try:
        overview = _cache("fees", FEES_TTL_SECONDS).get_or_fetch("overview", fees_api.get_coach_fees_with_stats)
    except ApiError as exc:
        _api_error("Error al cargar cuotas", exc)
        return

    fee_list = overview.fees
    stats = fee_ledger.fee_stats(fee_list, today)
    col1, col2, col3 = st.columns(3)
    col1.metric("Pendiente", _money(stats["total_pending"]))
    col2.metric("Cuotas pendientes", stats["pending_count"])
    col3.metric("Vencidas", stats["overdue_count"])

    to_notify = fee_ledger.fees_to_notify(fee_list, today)
    if st.button(f"Notificar vencidas ({len(to_notify)})", disabled=not to_notify):
        try:
            result = fees_api.notify_overdue_fees()
            st.toast(result.get("message") or f"{result.get('notified', 0)} alumnos notificados")
        except ApiError as exc:
            _api_error("Error al enviar notificaciones", exc)

    pending_tab, paid_tab, schedule_tab = st.tabs(["Pendientes", "Pagadas", "Aumentos"])
    with pending_tab:
        _render_pending_fees(fee_list, today)
    with paid_tab:
        _render_paid_fees(fee_list)
    with schedule_tab:
        _render_price_schedules(today)


# ---------------------------------------------------------------------------
# Food catalog
# ---------------------------------------------------------------------------


def _food_form(food: Optional[FoodItem], categories: List[str], key: str) -> Optional[FoodItem]:
    food = food or FoodItem(name="")
    with st.form(key):
        name = st.text_input("Nombre", value=food.name)
        category = st.selectbox(
            "Categoría",
            categories or [food.category],
            index=categories.index(food.category) if food.category in categories else 0,
        )
        col1, col2, col3 = st.columns(3)
        protein = col1.number_input("Proteínas /100g", min_value=0.0, value=float(food.protein_per_100g), step=0.1)
        carbs = col2.number_input("Carbohidratos /100g", min_value=0.0, value=float(food.carbs_per_100g), step=0.1)
        fat = col3.number_input("Grasas /100g", min_value=0.0, value=float(food.fat_per_100g), step=0.1)
        portion = st.number_input("Porción (g)", min_value=1.0, value=float(food.portion_grams or 100))
        st.caption(f"Calorías /100g: {macros.calories_from_macros(protein, carbs, fat):.0f} kcal")
        if not st.form_submit_button("Guardar"):
            return None
    if not name.strip():
        st.error("El nombre es obligatorio")
        return None
    return FoodItem(
        name=name.strip(),
        category=category,
        protein_per_100g=protein,
        carbs_per_100g=carbs,
        fat_per_100g=fat,
        calories_per_100g=macros.calories_from_macros(protein, carbs, fat),
        portion_grams=portion,
    )


def render_food_catalog() -> None:
    st.header("Catálogo de alimentos")
    try:
        categories = nutrition_api.get_categories()
    except ApiError as exc:
        _api_error("Error al cargar categorías", exc)
        categories = []
    category_values = [c.value for c in categories]
    category_labels = {c.value: c.label for c in categories}

    col1, col2 = st.columns([2, 1])
    search = col1.text_input("Buscar", key="catalog_search")
    category = col2.selectbox(
        "Categoría",
        [None, *category_values],
        format_func=lambda c: "Todas" if c is None else category_labels.get(c, c),
        key="catalog_category",
    )
    try:
        foods = nutrition_api.get_coach_food_items(search=search, category=category)
    except ApiError as exc:
        _api_error("Error al cargar alimentos", exc)
        return

    if not foods and not search and category is None:
        st.info("Tu catálogo está vacío.")
        if st.button("Cargar catálogo base"):
            try:
                result = nutrition_api.initialize_coach_catalog()
                st.toast(result.get("message") or f"{result.get('created', 0)} alimentos creados")
                st.rerun()
            except ApiError as exc:
                _api_error("Error al inicializar catálogo", exc)

    if foods:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Nombre": f.name,
                        "Categoría": category_labels.get(f.category, f.category),
                        "Kcal": macros.calories_from_macros(f.protein_per_100g, f.carbs_per_100g, f.fat_per_100g),
                        "P": f.protein_per_100g,
                        "C": f.carbs_per_100g,
                        "G": f.fat_per_100g,
                    }
                    for f in foods
                ]
            ),
            hide_index=True,
            width="stretch",
        )

    with st.expander("Nuevo alimento"):
        new_food = _food_form(None, category_values, "new_food_form")
        if new_food:
            try:
                nutrition_api.create_coach_food_item(new_food)
                st.toast("Alimento creado")
                st.rerun()
            except ApiError as exc:
                _api_error("Error al crear alimento", exc)

    if foods:
        with st.expander("Editar o eliminar"):
            by_name = {f"{f.name} (#{f.id})": f for f in foods}
            selected = by_name[st.selectbox("Alimento", list(by_name), key="edit_food_select")]
            edited = _food_form(selected, category_values, f"edit_food_form_{selected.id}")
            if edited:
                try:
                    nutrition_api.update_coach_food_item(selected.id, edited)
                    st.toast("Alimento actualizado")
                    st.rerun()
                except ApiError as exc:
                    _api_error("Error al actualizar alimento", exc)
            if st.button("Eliminar", key=f"delete_food_{selected.id}"):
                try:
                    nutrition_api.delete_coach_food_item(selected.id)
                    st.toast("Alimento eliminado")
                    st.rerun()
                except ApiError as exc:
                    _api_error("Error al eliminar alimento", exc)

    with st.expander("Alimentos creados por alumnos"):
        try:
            custom = nutrition_api.get_student_custom_foods()
        except ApiError as exc:
            _api_error("Error al cargar alimentos de alumnos", exc)
            custom = {"by_student": []}
        if not custom["by_student"]:
            st.caption("Tus alumnos no crearon alimentos.")
        for group in custom["by_student"]:
            st.markdown(f"**{group['student_name']}** · {len(group['foods'])} alimentos")
            st.write(", ".join(f.name for f in group["foods"]))


# ---------------------------------------------------------------------------
# Meal plans
# ---------------------------------------------------------------------------


def _draft() -> MealPlanTemplate:
    if "meal_plan_draft" not in st.session_state:
        st.session_state["meal_plan_draft"] = MealPlanTemplate(
            name="",
            meals=[MealPlanMeal(name=name, icon=icon, order=i) for i, (name, icon) in enumerate(DEFAULT_MEALS)],
        )
    return st.session_state["meal_plan_draft"]


def _render_meal(meal: MealPlanMeal, index: int, catalog: List[FoodItem]) -> None:
    totals = macros.meal_totals(meal)
    with st.container(border=True):
        st.markdown(f"**{meal.icon} {meal.name}** · {totals['calories']:.0f} kcal")
        for food_index, food in enumerate(meal.foods):
            cols = st.columns([4, 1])
            cols[0].caption(
                f"{food.name} · {food.quantity:g}{food.unit} · {food.calories:.0f} kcal"
                f" · P {food.protein:g} · C {food.carbs:g} · G {food.fat:g}"
            )
            if cols[1].button("Quitar", key=f"remove_food_{index}_{food_index}"):
                meal.foods.pop(food_index)
                st.rerun()
        if catalog:
            by_name = {f"{f.name} (#{f.id})": f for f in catalog}
            cols = st.columns([3, 1, 1])
            choice = cols[0].selectbox("Alimento", list(by_name), key=f"meal_food_{index}")
            grams = cols[1].number_input("Gramos", min_value=0.0, value=100.0, step=10.0, key=f"meal_grams_{index}")
            preview = macros.scale_food(by_name[choice], grams)
            cols[0].caption(f"{preview.calories:.0f} kcal · P:{preview.protein:g}g C:{preview.carbs:g}g G:{preview.fat:g}g")
            if cols[2].button("Agregar", key=f"meal_add_{index}"):
                meal.foods.append(preview)
                st.rerun()


def _render_builder(catalog: List[FoodItem], editing_id: Optional[int]) -> None:
    draft = _draft()
    draft.name = st.text_input("Nombre del plan", value=draft.name, placeholder="Ej: Plan Déficit 2000 kcal")
    draft.objective = st.selectbox(
        "Objetivo",
        list(PLAN_OBJECTIVES),
        index=list(PLAN_OBJECTIVES).index(draft.objective) if draft.objective in PLAN_OBJECTIVES else 0,
        format_func=PLAN_OBJECTIVES.get,
    )
    for index, meal in enumerate(draft.meals):
        _render_meal(meal, index, catalog)

    cols = st.columns([2, 1, 1])
    new_meal = cols[0].text_input("Nueva comida", key="new_meal_name")
    icon = cols[1].selectbox("Ícono", MEAL_ICONS, key="new_meal_icon")
    if cols[2].button("Agregar comida") and new_meal.strip():
        draft.meals.append(MealPlanMeal(name=new_meal.strip(), icon=icon, order=len(draft.meals)))
        st.rerun()

    totals = macros.plan_totals(draft.meals)
    metric_cols = st.columns(4)
    metric_cols[0].metric("Calorías", totals["calories"])
    metric_cols[1].metric("Proteínas", f"{totals['protein']} g")
    metric_cols[2].metric("Carbohidratos", f"{totals['carbs']} g")
    metric_cols[3].metric("Grasas", f"{totals['fat']} g")

    if st.button("Guardar plan", type="primary"):
        if not draft.name.strip():
            st.error("Ingresá un nombre para el plan")
            return
        try:
            if editing_id:
                meal_plans_api.update_template(editing_id, draft)
            else:
                meal_plans_api.create_template(draft)
        except ApiError as exc:
            _api_error("Error al guardar el plan", exc)
            return
        st.session_state.pop("meal_plan_draft", None)
        st.session_state.pop("meal_plan_editing", None)
        st.toast("Plan guardado")
        st.rerun()


def render_meal_plans(students: List[Student]) -> None:
    st.header("Planes de alimentación")
    try:
        templates = meal_plans_api.get_templates()
    except ApiError as exc:
        _api_error("Error al cargar planes", exc)
        templates = []

    list_tab, builder_tab, assigned_tab = st.tabs(["Mis planes", "Editor", "Asignados"])
    with list_tab:
        if not templates:
            st.info("Todavía no creaste planes.")
        for template in templates:
            with st.container(border=True):
                st.markdown(f"**{template.name}** · {template.total_calories:.0f} kcal · {template.meals_count} comidas")
                st.caption(PLAN_OBJECTIVES.get(template.objective or "", template.objective or ""))
                cols = st.columns(4)
                if cols[0].button("Editar", key=f"edit_plan_{template.id}"):
                    try:
                        st.session_state["meal_plan_draft"] = meal_plans_api.get_template(template.id)
                        st.session_state["meal_plan_editing"] = template.id
                        st.toast("Plan cargado en el editor")
                    except ApiError as exc:
                        _api_error("Error al cargar el plan", exc)
                if cols[1].button("Duplicar", key=f"dup_plan_{template.id}"):
                    try:
                        meal_plans_api.duplicate_template(template.id)
                        st.rerun()
                    except ApiError as exc:
                        _api_error("Error al duplicar", exc)
                if cols[2].button("Eliminar", key=f"del_plan_{template.id}"):
                    try:
                        meal_plans_api.delete_template(template.id)
                        st.rerun()
                    except ApiError as exc:
                        _api_error("Error al eliminar", exc)
                with cols[3].popover("Asignar"):
                    options = {s.id: s.full_name for s in students}
                    chosen = st.multiselect("Alumnos", list(options), format_func=options.get, key=f"assign_{template.id}")
                    if st.button("Confirmar", key=f"assign_btn_{template.id}", disabled=not chosen):
                        try:
                            result = meal_plans_api.assign_plan(template.id, chosen)
                            st.toast(f"Asignado a {result.get('assigned', 0)} alumnos")
                        except ApiError as exc:
                            _api_error("Error al asignar", exc)
    with builder_tab:
        try:
            catalog = nutrition_api.get_coach_food_items()
        except ApiError as exc:
            _api_error("Error al cargar el catálogo", exc)
            catalog = []
        _render_builder(catalog, st.session_state.get("meal_plan_editing"))
    with assigned_tab:
        try:
            assigned = meal_plans_api.get_assigned_plans()
        except ApiError as exc:
            _api_error("Error al cargar asignaciones", exc)
            assigned = []
        for plan in assigned:
            cols = st.columns([3, 3, 1])
            cols[0].write(plan.template_name)
            cols[1].write(f"{plan.student_name}{' (personalizado)' if plan.is_customized else ''}")
            if cols[2].button("Quitar", key=f"unassign_{plan.id}"):
                try:
                    meal_plans_api.unassign_plan(plan.template_id, plan.student_id)
                    st.rerun()
                except ApiError as exc:
                    _api_error("Error al desasignar", exc)


# ---------------------------------------------------------------------------
# Student progress
# ---------------------------------------------------------------------------


def _measure_row(label: str, value: Optional[float], previous: Optional[float], unit: str, inverse: bool) -> str:
    if value is None:
        return f"{label}: -"
    diff = measurements.get_change(value, previous)
    if diff is None or diff == 0:
        return f"{label}: {value} {unit}"
    arrow = {"up-good": "🟢▲", "up-bad": "🟠▲", "down-good": "🟢▼", "down-bad": "🟠▼"}[measurements.trend(diff, inverse)]
    return f"{label}: {value} {unit} {arrow} {diff:+.1f}"


def _render_compare(history: List[Anthropometry]) -> None:
    key = "measurement_compare"
    selection = st.session_state.get(key, (None, None))
    cols = st.columns(min(len(history), 6) or 1)
    for i, record in enumerate(history[:6]):
        marker = "①" if selection[0] == record.id else "②" if selection[1] == record.id else ""
        if cols[i].button(f"{marker} {format_date(record.date)}", key=f"cmp_{record.id}"):
            st.session_state[key] = measurements.toggle_compare(selection, record.id)
            st.rerun()

    before, after = measurements.ordered_comparison(history, selection)
    if before is None or after is None:
        st.caption("Elegí dos mediciones para comparar.")
        return
    photo_cols = st.columns(2)
    for col, record, title in ((photo_cols[0], before, "Antes"), (photo_cols[1], after, "Después")):
        col.markdown(f"**{title}** · {format_date(record.date)}")
        if record.photo_front:
            col.image(record.photo_front)
    table = pd.DataFrame(measurements.comparison_table(before, after))
    st.dataframe(table[["label", "before", "after", "change", "unit"]], hide_index=True, width="stretch")


def render_measurements_history(history: List[Anthropometry]) -> None:
    """Shared by the coach progress page and the student measurements page."""
    if not history:
        st.info("Sin mediciones registradas.")
        return
    history_tab, compare_tab, photos_tab = st.tabs(["Historial", "Comparar", "Fotos"])
    with history_tab:
        for index, record in enumerate(history):
            previous = history[index + 1] if index + 1 < len(history) else None
            with st.expander(f"{format_date(record.date, with_weekday=True)} · {record.weight or '-'} kg", expanded=index == 0):
                for section, title in (("pliegues", "Pliegues"), ("perimetros", "Perímetros"), ("composicion", "Composición")):
                    st.markdown(f"**{title}**")
                    for field in measurements.fields_in(section):
                        meta = measurements.MEASUREMENT_FIELDS[field]
                        st.caption(
                            _measure_row(
                                meta["label"],
                                getattr(record, field),
                                getattr(previous, field) if previous else None,
                                meta["unit"],
                                meta["inverse"],
                            )
                        )
                if record.notes:
                    st.info(record.notes)
        deltas = measurements.history_deltas(history, ["weight", "suma_pliegues", "tejido_adiposo_pct"])
        st.dataframe(deltas, hide_index=True, width="stretch")
    with compare_tab:
        _render_compare(history)
    with photos_tab:
        groups = measurements.photos_by_date(history)
        if not groups:
            st.caption("Sin fotos.")
        for group in groups:
            st.markdown(f"**{format_date(group['date'])}**")
            cols = st.columns(3)
            for col, photo in zip(cols, group["photos"]):
                col.image(photo["url"], caption=photo["type"])


def render_student_progress(student: Student) -> None:
    st.subheader(f"Progreso de {student.full_name}")
    try:
        weights = _cache("weights", WEIGHT_TTL_SECONDS).get_or_fetch(
            student.id, lambda: health_api.get_weight_history(student.id, limit=60)
        )
        history = health_api.get_anthropometry_history(student.id)
    except ApiError as exc:
        _api_error("Error al cargar el progreso", exc)
        return
    series = measurements.weight_series(weights)
    if not series.empty:
        st.line_chart(series)
    render_measurements_history(history)
    with st.expander("Nueva medición"):
        _measurement_form(student)


def _measurement_form(student: Student) -> None:
    with st.form(f"anthropometry_{student.id}", clear_on_submit=True):
        measured_on = st.date_input("Fecha", value=date.today(), max_value=date.today(), format="DD/MM/YYYY")
        values: Dict[str, Optional[float]] = {}
        for section, title in (("basic", "Datos básicos"), ("pliegues", "Pliegues"), ("perimetros", "Perímetros")):
            st.markdown(f"**{title}**")
            cols = st.columns(3)
            for i, field in enumerate(measurements.fields_in(section)):
                meta = measurements.MEASUREMENT_FIELDS[field]
                # the sum of skinfolds is computed by the server
                if field == "suma_pliegues":
                    continue
                values[field] = cols[i % 3].number_input(
                    f"{meta['label']} ({meta['unit']})", min_value=0.0, value=None, step=0.1, key=f"{field}_{student.id}"
                )
        notes = st.text_area("Notas")
        if not st.form_submit_button("Guardar medición"):
            return
    record = Anthropometry(date=measured_on.isoformat(), notes=notes or None, **values)
    try:
        health_api.add_anthropometry(student.id, record)
    except ApiError as exc:
        _api_error("Error al guardar la medición", exc)
        return
    st.toast("Medición guardada")
    st.rerun()


# ---------------------------------------------------------------------------
# Student settings
# ---------------------------------------------------------------------------


def _render_calculator(student: Student, profile: Dict[str, Any]) -> None:
    st.markdown("**Calculadora de calorías**")
    with st.form(f"calculator_{student.id}"):
        col1, col2, col3 = st.columns(3)
        weight = col1.number_input("Peso (kg)", min_value=30.0, value=float(profile.get("currentWeight") or 70))
        height = col2.number_input("Altura (cm)", min_value=100.0, value=float(profile.get("heightCm") or 170))
        age = col3.number_input("Edad", min_value=10, value=int(profile.get("age") or 30))
        col1, col2, col3 = st.columns(3)
        sex = col1.selectbox("Sexo", ["male", "female"], index=0 if profile.get("sex") != "female" else 1)
        activity = col2.number_input("Factor de actividad", min_value=1.0, max_value=2.5, value=float(profile.get("activityFactor") or 1.55), step=0.05)
        days = col3.number_input("Días de entrenamiento", min_value=0, max_value=7, value=int(profile.get("trainingDaysPerWeek") or 3))
        goal = st.selectbox("Objetivo", list(macros.GOALS), format_func=lambda g: macros.GOALS[g]["label"], index=1)
        if not st.form_submit_button("Calcular"):
            return
    try:
        result = nutrition_api.calculate_calories(weight, height, age, sex, activity, days)
    except ApiError as exc:
        _api_error("Error al calcular", exc)
        return
    targets = macros.suggest_targets(result.get("maintenance"), weight, goal)
    st.session_state[f"targets_{student.id}"] = targets
    st.toast(
        f"TMB: {result.get('tmb')} kcal | Mantenimiento: {result.get('maintenance') or macros.DEFAULT_MAINTENANCE} kcal"
        f" | Ajustado: {targets['calories']} kcal"
    )


def render_student_settings(student: Student) -> None:
    st.subheader(f"Configuración de {student.full_name}")

    with st.form(f"goals_{student.id}"):
        st.markdown("**Objetivos**")
        col1, col2 = st.columns(2)
        steps_goal = col1.number_input("Pasos diarios", min_value=0, value=int(student.daily_steps_goal or 8000), step=500)
        weight_goal = col2.number_input("Cambio de peso semanal (kg)", value=float(student.weekly_weight_goal or 0), step=0.1)
        if st.form_submit_button("Guardar objetivos"):
            try:
                students_api.update_student_goals(student.id, daily_steps_goal=steps_goal, weekly_weight_goal=weight_goal)
                st.toast("Objetivos actualizados")
            except ApiError as exc:
                _api_error("Error al guardar objetivos", exc)

    with st.form(f"permissions_{student.id}"):
        st.markdown("**Permisos**")
        current = student.permissions
        permissions = StudentPermissions(
            can_access_routine=st.toggle("Rutina", value=current.can_access_routine),
            can_access_nutrition=st.toggle("Nutrición", value=current.can_access_nutrition),
            can_access_weight=st.toggle("Peso", value=current.can_access_weight),
            can_access_cardio=st.toggle("Cardio", value=current.can_access_cardio),
            can_access_progress=st.toggle("Progreso", value=current.can_access_progress),
        )
        if st.form_submit_button("Guardar permisos"):
            try:
                students_api.update_student_permissions(student.id, permissions)
                st.toast("Permisos actualizados")
            except ApiError as exc:
                _api_error("Error al guardar permisos", exc)

    try:
        profile_model = nutrition_api.get_nutrition_profile(student.id)
    except ApiError as exc:
        _api_error("Error al cargar perfil nutricional", exc)
        profile_model = None
    profile = profile_model.to_payload() if profile_model else {}

    _render_calculator(student, profile)

    suggested = st.session_state.get(f"targets_{student.id}", {})
    with st.form(f"targets_form_{student.id}"):
        st.markdown("**Macros objetivo**")
        col1, col2, col3 = st.columns(3)
        protein = col1.number_input("Proteínas (g)", min_value=0, value=int(suggested.get("protein") or profile.get("targetProteinGrams") or 0))
        carbs = col2.number_input("Carbohidratos (g)", min_value=0, value=int(suggested.get("carbs") or profile.get("targetCarbsGrams") or 0))
        fat = col3.number_input("Grasas (g)", min_value=0, value=int(suggested.get("fat") or profile.get("targetFatGrams") or 0))
        calories = macros.calories_from_macros(protein, carbs, fat)
        st.caption(f"Calorías: {calories} kcal")
        if st.form_submit_button("Guardar macros"):
            try:
                nutrition_api.update_nutrition_profile(
                    student.id,
                    {
                        **profile,
                        "targetDailyCalories": calories,
                        "targetProteinGrams": protein,
                        "targetCarbsGrams": carbs,
                        "targetFatGrams": fat,
                    },
                )
                st.session_state.pop(f"targets_{student.id}", None)
                st.toast("Perfil nutricional actualizado")
            except ApiError as exc:
                _api_error("Error al guardar macros", exc)


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------

COACH_PAGES = ["Cuotas", "Catálogo de alimentos", "Planes de alimentación", "Alumnos"]


def render_coach_workspace(page: str, coach_user_id: int) -> None:
    if page == "Cuotas":
        render_fees()
    elif page == "Catálogo de alimentos":
        render_food_catalog()
    elif page == "Planes de alimentación":
        render_meal_plans(load_students(coach_user_id))
    elif page == "Alumnos":
        st.header("Alumnos")
        student = select_student(load_students(coach_user_id))
        if student is None:
            return
        progress_tab, settings_tab = st.tabs(["Progreso", "Configuración"])
        with progress_tab:
            render_student_progress(student)
        with settings_tab:
            render_student_settings(student)
