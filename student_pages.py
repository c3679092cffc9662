"""
Student workspace pages: daily check-in, sleep, nutrition, fees,
measurements, cardio, workout tracker and the steps/weight dashboard.
"""

import logging
from datetime import date, time as dt_time
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

import cardio_stats
import correlation
import daily_record
import fee_ledger
import local_store
import workout_tracker
from coach_api import cardio as cardio_api
from coach_api import fees as fees_api
from coach_api import health as health_api
from coach_api import nutrition as nutrition_api
from coach_api import routine as routine_api
from coach_api.schemas import DailyFoodLog, Exercise, Student, TrainingDay, WorkoutSet
from coach_pages import render_measurements_history
from date_utils import add_days, format_date, month_name, today_string
from day_cache import SEARCH_CACHE_SIZE, SUMMARY_TTL_SECONDS, DayCache, TTLCache, WeekCache
from exceptions import ApiError, FormValidationError

logger = logging.getLogger("fitcoach.student")


def _api_error(action: str, exc: ApiError) -> None:
    logger.warning("%s failed: %s", action, exc.message)
    st.error(f"{action}: {exc.message}")


def _state(key: str, factory):
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


def _sleep_cache(student_id: int) -> DayCache:
    # scoped to this browser session; a new visit refetches from the API
    return _state(f"sleep_day_cache_{student_id}", DayCache)


def _fetch_sleep(student_id: int):
    return lambda: health_api.get_sleep_logs(student_id, limit=daily_record.SLEEP_PRELOAD_LIMIT)


# ---------------------------------------------------------------------------
# Daily record
# ---------------------------------------------------------------------------

TAB_LABELS = {"weight": "⚖️ Peso", "sleep": "😴 Sueño", "steps": "👟 Pasos"}


def _weight_form(student: Student, day: str, existing: Optional[Dict[str, Any]]) -> None:
    with st.form(f"weight_form_{day}"):
        text = st.text_input("Peso (kg)", value=f"{existing['weight']:g}" if existing else "")
        if not st.form_submit_button("Actualizar peso" if existing else "Guardar peso"):
            return
    try:
        weight = daily_record.validate_weight(text)
        if existing:
            health_api.update_weight(existing["id"], weight)
        else:
            health_api.create_weight(student.id, weight, day=day)
    except FormValidationError as exc:
        st.error(exc.message)
        return
    except ApiError as exc:
        _api_error("Error al guardar el peso", exc)
        return
    st.toast("Peso guardado")
    st.rerun()


def _steps_form(student: Student, day: str, existing: Optional[Dict[str, Any]]) -> None:
    with st.form(f"steps_form_{day}"):
        text = st.text_input("Pasos", value=str(existing["steps"]) if existing else "")
        if not st.form_submit_button("Actualizar pasos" if existing else "Guardar pasos"):
            return
    try:
        steps = daily_record.validate_steps(text)
        cardio_api.add_manual_steps(student.id, steps, day=day, replace=existing is not None)
    except FormValidationError as exc:
        st.error(exc.message)
        return
    except ApiError as exc:
        _api_error("Error al guardar los pasos", exc)
        return
    st.toast("Pasos guardados")
    st.rerun()


def _sleep_form(student: Student, day: str, existing: Optional[Dict[str, Any]], cache: DayCache) -> None:
    with st.form(f"sleep_form_{day}"):
        col1, col2 = st.columns(2)
        hours = col1.number_input("Horas", min_value=0, max_value=24, value=int(existing["sleep_hours"]) if existing else 7)
        minutes = col2.number_input("Minutos", min_value=0, max_value=59, step=5, value=int(existing["sleep_minutes"]) if existing else 0)
        quality = st.radio(
            "Calidad",
            list(daily_record.SLEEP_QUALITIES),
            index=list(daily_record.SLEEP_QUALITIES).index(existing["quality"]) if existing and existing.get("quality") in daily_record.SLEEP_QUALITIES else 0,
            format_func=lambda q: daily_record.SLEEP_QUALITIES[q]["label"],
            horizontal=True,
        )
        bedtime = st.time_input("Hora de acostarse", value=dt_time(23, 0))
        notes = st.text_input("Notas", value=(existing or {}).get("notes") or "")
        st.caption(
            f"{daily_record.format_sleep(hours, minutes)} · {daily_record.sleep_label(hours, minutes)}"
        )
        if not st.form_submit_button("Guardar sueño"):
            return
    try:
        hours, minutes = daily_record.validate_sleep(hours, minutes)
        log = health_api.add_sleep_log(
            student.id,
            hours,
            minutes,
            quality=quality,
            day=day,
            bedtime=bedtime.strftime("%H:%M"),
            notes=notes or None,
        )
    except FormValidationError as exc:
        st.error(exc.message)
        return
    except ApiError as exc:
        _api_error("Error al guardar el sueño", exc)
        return
    cache.set(day, daily_record.sleep_record(log))
    st.toast("Sueño guardado")
    st.rerun()


def render_daily_record(student: Student, today: Optional[date] = None) -> None:
    today = today or date.today()
    st.header("Registro diario")
    picked = st.date_input("Fecha", value=today, max_value=today, format="DD/MM/YYYY")
    day = picked.isoformat()
    cache = _sleep_cache(student.id)

    def sleep_lookup(iso_date: str):
        try:
            return daily_record.load_sleep_record(cache, _fetch_sleep(student.id), iso_date)
        except ApiError as exc:
            logger.warning("Sleep lookup for %s failed: %s", iso_date, exc.message)
            return None

    logged = daily_record.already_logged(
        day,
        lambda d: health_api.get_weight_by_date(student.id, d),
        lambda d: cardio_api.get_steps_by_date(student.id, d),
        sleep_lookup,
    )
    done = daily_record.logged_flags(logged)
    pending = daily_record.next_pending_tab(done["weight"], done["steps"], done["sleep"])
    if pending is None:
        st.success("¡Completaste el registro del día!")

    tabs = daily_record.METRIC_TABS
    tab = st.radio(
        "Métrica",
        tabs,
        index=tabs.index(pending) if pending else 0,
        format_func=lambda t: f"{TAB_LABELS[t]} {'✅' if done[t] else ''}",
        horizontal=True,
        label_visibility="collapsed",
    )
    if tab == "weight":
        _weight_form(student, day, logged["weight"])
    elif tab == "steps":
        _steps_form(student, day, logged["steps"])
    else:
        _sleep_form(student, day, logged["sleep"], cache)


# ---------------------------------------------------------------------------
# Sleep log
# ---------------------------------------------------------------------------


def render_sleep_log(student: Student) -> None:
    st.header("Sueño")
    cache = _sleep_cache(student.id)
    preload_key = f"sleep_preloaded_{student.id}"
    if not st.session_state.get(preload_key):
        try:
            seeded = daily_record.preload_sleep(cache, _fetch_sleep(student.id)())
            logger.info("Preloaded %d sleep records for student %s", seeded, student.id)
            st.session_state[preload_key] = True
        except ApiError as exc:
            _api_error("Error al cargar el historial de sueño", exc)

    records = sorted(
        (cache.get(iso) for iso in list(cache.storage)),
        key=lambda r: r["date"] if r else "",
        reverse=True,
    )
    records = [r for r in records if r]
    if not records:
        st.info("Todavía no registraste tu sueño.")
        return

    df = pd.DataFrame(records)
    df["horas"] = df["sleep_hours"] + df["sleep_minutes"] / 60
    chart = df.sort_values("date").set_index("date")["horas"]
    st.bar_chart(chart)

    for record in records[:14]:
        hours, minutes = record["sleep_hours"], record["sleep_minutes"]
        color = daily_record.sleep_color(hours, minutes)
        quality = daily_record.SLEEP_QUALITIES.get(record.get("quality"), {}).get("label", "")
        st.markdown(
            f"**{format_date(record['date'], with_weekday=True)}** · "
            f"<span style='color:{color}'>{daily_record.format_sleep(hours, minutes)}"
            f" ({daily_record.sleep_label(hours, minutes)})</span> · {quality}",
            unsafe_allow_html=True,
        )


# ---------------------------------------------------------------------------
# Nutrition day view
# ---------------------------------------------------------------------------


def _load_food_log(student: Student, day: str) -> Optional[DailyFoodLog]:
    cache = _state(f"nutrition_day_cache_{student.id}", DayCache)
    if cache.has(day):
        return cache.get(day)
    try:
        log = nutrition_api.get_daily_food_log(student.id, day)
    except ApiError as exc:
        _api_error("Error al cargar el registro", exc)
        return None
    cache.set(day, log)
    return log


def _add_food(student: Student, day: str) -> None:
    search_cache = _state(
        f"food_search_cache_{student.id}", lambda: TTLCache(SUMMARY_TTL_SECONDS, max_entries=SEARCH_CACHE_SIZE)
    )
    query = st.text_input("Buscar alimento", key="food_search")
    if len(query.strip()) < 2:
        return
    try:
        foods = search_cache.get_or_fetch(query.strip().lower(), lambda: nutrition_api.search_foods(student.id, query))
        meal_types = nutrition_api.get_meal_types(student.id)
    except ApiError as exc:
        _api_error("Error al buscar alimentos", exc)
        return
    if not foods:
        st.caption("Sin resultados.")
        return
    by_name = {f"{f.name} (#{f.id})": f for f in foods}
    with st.form("add_food_form"):
        choice = st.selectbox("Alimento", list(by_name))
        grams = st.number_input("Gramos", min_value=1.0, value=float(by_name[choice].portion_grams or 100))
        meal_type = st.selectbox("Comida", meal_types, format_func=lambda m: m.name) if meal_types else None
        if not st.form_submit_button("Agregar"):
            return
    try:
        nutrition_api.add_food_log(
            student.id,
            grams,
            food_item_id=by_name[choice].id,
            meal_type_id=meal_type.id if meal_type else None,
            day=day,
        )
    except ApiError as exc:
        _api_error("Error al agregar alimento", exc)
        return
    st.session_state[f"nutrition_day_cache_{student.id}"].invalidate(day)
    st.toast("Alimento agregado")
    st.rerun()


def render_nutrition_day(student: Student, today: Optional[date] = None) -> None:
    today_iso = today_string(today)
    st.header("Nutrición")
    key = "nutrition_day"
    day = st.session_state.get(key, today_iso)
    # never show future days
    if day > today_iso:
        day = today_iso

    col1, col2, col3, col4 = st.columns([1, 2, 1, 1])
    if col1.button("◀", key="nutrition_prev"):
        st.session_state[key] = add_days(day, -1)
        st.rerun()
    col2.markdown(f"**{format_date(day, with_weekday=True)}**")
    if col3.button("▶", key="nutrition_next", disabled=day >= today_iso):
        st.session_state[key] = min(add_days(day, 1), today_iso)
        st.rerun()
    if col4.button("Hoy", key="nutrition_today", disabled=day == today_iso):
        st.session_state[key] = today_iso
        st.rerun()

    log = _load_food_log(student, day)
    if log is None:
        return

    cols = st.columns(4)
    for col, label, consumed, target, unit in (
        (cols[0], "Calorías", log.total_calories, log.target_calories, "kcal"),
        (cols[1], "Proteínas", log.total_protein, log.target_protein, "g"),
        (cols[2], "Carbohidratos", log.total_carbs, log.target_carbs, "g"),
        (cols[3], "Grasas", log.total_fat, log.target_fat, "g"),
    ):
        col.metric(label, f"{consumed:.0f} {unit}", f"de {target:.0f}" if target else None, delta_color="off")
        if target:
            col.progress(min(1.0, consumed / target))

    if not log.entries:
        st.info("No registraste comidas este día.")
    for entry in log.entries:
        cols = st.columns([4, 1])
        meal = entry.meal_type.name if entry.meal_type else "Sin comida"
        name = entry.food_item.name if entry.food_item else "Receta"
        cols[0].caption(f"{meal} · {name} · {entry.quantity_grams:g} g · {entry.calories:.0f} kcal")
        if cols[1].button("Eliminar", key=f"del_entry_{entry.id}"):
            try:
                nutrition_api.delete_food_log(entry.id)
                st.session_state[f"nutrition_day_cache_{student.id}"].invalidate(day)
                st.rerun()
            except ApiError as exc:
                _api_error("Error al eliminar", exc)

    with st.expander("Agregar alimento"):
        _add_food(student, day)


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


def render_student_fees(student: Student, today: Optional[date] = None) -> None:
    today = today or date.today()
    st.header("Mis cuotas")
    try:
        fee_list, coach = fees_api.get_student_fees_with_coach(student.id)
    except ApiError as exc:
        _api_error("Error al cargar cuotas", exc)
        return

    visible = fee_ledger.student_visible_fees(fee_list, today)
    st.metric("Total a pagar", f"${fee_ledger.student_total_pending(visible):,.0f}".replace(",", "."))
    if not visible:
        st.success("Estás al día.")
    for fee in visible:
        overdue = fee_ledger.is_overdue(fee, today)
        with st.container(border=True):
            st.markdown(
                f"**{fee.month_name or month_name(fee.month or 0)} {fee.year or ''}** · "
                f"${fee_ledger.remaining_for(fee):,.0f}".replace(",", ".")
            )
            st.caption(
                f"{'🔴 Vencida' if overdue else '🟡 Pendiente'} · vence {format_date(fee.due_date)}"
            )

    if coach and (coach.payment_alias or coach.payment_notes):
        st.markdown("**Datos de pago**")
        if coach.payment_alias:
            st.code(coach.payment_alias)
        if coach.payment_notes:
            st.caption(coach.payment_notes)

    st.markdown("---")
    st.subheader("Pagos anteriores")
    for (year, month), group in fee_ledger.paid_fees_by_month(fee_list):
        total = sum(f.amount_paid or f.paid_amount or f.amount_due for f in group)
        st.caption(f"{month_name(month).capitalize()} {year}: ${total:,.0f}".replace(",", "."))


# ---------------------------------------------------------------------------
# Measurements
# ---------------------------------------------------------------------------


def render_student_measurements(student: Student) -> None:
    st.header("Mis mediciones")
    try:
        history = health_api.get_anthropometry_history(student.id)
    except ApiError as exc:
        _api_error("Error al cargar mediciones", exc)
        return
    render_measurements_history(history)


# ---------------------------------------------------------------------------
# Cardio
# ---------------------------------------------------------------------------


def _render_add_activity(student: Student, today: date) -> None:
    activity = st.selectbox(
        "Actividad",
        list(cardio_stats.ACTIVITIES),
        format_func=lambda a: f"{cardio_stats.ACTIVITIES[a]['emoji']} {cardio_stats.ACTIVITIES[a]['label']}",
    )
    info = cardio_stats.activity_info(activity)
    with st.form("cardio_form"):
        col1, col2 = st.columns(2)
        duration = col1.number_input("Duración (min)", min_value=1, value=30)
        intensity = col2.selectbox(
            "Intensidad",
            list(cardio_stats.INTENSITY_LEVELS),
            index=1,
            format_func=lambda i: cardio_stats.INTENSITY_LEVELS[i]["label"],
        )
        distance = st.number_input("Distancia (km)", min_value=0.0, step=0.1) if info["has_distance"] else None
        weight = st.number_input("Tu peso (kg)", min_value=30.0, value=float(cardio_stats.DEFAULT_WEIGHT_KG))
        day = st.date_input("Fecha", value=today, max_value=today, format="DD/MM/YYYY")
        notes = st.text_input("Notas")
        calories = cardio_stats.estimate_calories(activity, duration, weight)
        st.caption(f"≈ {calories} kcal · {cardio_stats.format_duration(duration)}")
        if not st.form_submit_button("Registrar"):
            return
    try:
        cardio_api.create_cardio(
            student.id,
            activity,
            duration_minutes=duration,
            distance_km=distance or None,
            intensity=intensity,
            day=day.isoformat(),
            notes=notes or None,
        )
    except ApiError as exc:
        _api_error("Error al registrar la actividad", exc)
        return
    st.toast(f"{info['emoji']} {info['label']} registrada")
    st.rerun()


def _render_steps(student: Student, today: date) -> None:
    col1, col2 = st.columns(2)
    year = col1.selectbox("Año", [today.year - 1, today.year], index=1)
    month = col2.selectbox(
        "Mes", list(range(1, 13)), index=today.month - 1, format_func=lambda m: month_name(m).capitalize()
    )
    entries = cardio_api.get_monthly_steps(student.id, year, month)
    if entries:
        df = pd.DataFrame(entries).set_index("date")["steps"]
        st.bar_chart(df)
        with st.expander("Borrar pasos de un día"):
            day = st.selectbox("Día", [e["date"] for e in entries], format_func=format_date)
            if st.button("Borrar"):
                try:
                    cardio_api.delete_steps_by_date(student.id, day)
                    st.toast("Pasos eliminados")
                    st.rerun()
                except ApiError as exc:
                    _api_error("Error al borrar los pasos", exc)
    else:
        st.caption("Sin pasos registrados en el mes.")

    try:
        stats = cardio_api.get_steps_weekly_stats(student.id)
    except ApiError as exc:
        _api_error("Error al cargar estadísticas", exc)
        return
    weeks = stats.get("weeks") or []
    if weeks:
        st.markdown("**Promedio semanal**")
        st.line_chart(pd.DataFrame(weeks).set_index("weekStart")["averageSteps"])
        summary = stats.get("summary") or {}
        st.caption(f"Cumplimiento del objetivo: {summary.get('overallComplianceRate', 0)}%")


def render_cardio(student: Student, today: Optional[date] = None) -> None:
    today = today or date.today()
    st.header("Cardio")
    add_tab, steps_tab, summary_tab = st.tabs(["Registrar", "Pasos", "Resumen"])
    with add_tab:
        _render_add_activity(student, today)
        try:
            today_logs = cardio_api.get_today_cardio(student.id)
        except ApiError as exc:
            _api_error("Error al cargar actividades de hoy", exc)
            today_logs = []
        for log in today_logs:
            info = cardio_stats.activity_info(log.activity_type)
            cols = st.columns([4, 1])
            cols[0].caption(
                f"{info['emoji']} {info['label']} · {cardio_stats.format_duration(int(log.duration_minutes))}"
                f" · {log.calories_burned or 0:.0f} kcal"
            )
            if cols[1].button("Eliminar", key=f"del_cardio_{log.id}"):
                try:
                    cardio_api.delete_cardio(log.id)
                    st.rerun()
                except ApiError as exc:
                    _api_error("Error al eliminar", exc)
    with steps_tab:
        _render_steps(student, today)
    with summary_tab:
        try:
            week = cardio_api.get_week_cardio(student.id)
            logs = cardio_api.get_cardio_logs(student.id, limit=100)
        except ApiError as exc:
            _api_error("Error al cargar el resumen", exc)
            return
        cols = st.columns(4)
        cols[0].metric("Sesiones", week.get("totalSessions", 0))
        cols[1].metric("Minutos", week.get("totalMinutes", 0))
        cols[2].metric("Distancia", f"{week.get('totalDistance', 0)} km")
        cols[3].metric("Pasos", week.get("totalSteps", 0))
        breakdown = cardio_stats.activity_breakdown(logs)
        if not breakdown.empty:
            st.dataframe(breakdown.drop(columns=["activity"]), hide_index=True, width="stretch")


# ---------------------------------------------------------------------------
# Workout tracker
# ---------------------------------------------------------------------------


def _pick_day(student: Student) -> Optional[TrainingDay]:
    try:
        macrocycles = routine_api.get_student_macrocycles(student.id)
    except ApiError as exc:
        _api_error("Error al cargar la rutina", exc)
        return None
    days = [
        (f"{meso.name} · {micro.name} · {day.nombre or f'Día {day.dia}'}", day)
        for macro in macrocycles
        for meso in macro.mesocycles
        for micro in meso.microcycles
        for day in micro.days
        if not day.es_descanso
    ]
    if not days:
        st.info("Tu coach todavía no cargó una rutina.")
        return None
    labels = [label for label, _ in days]
    choice = st.selectbox("Día de entrenamiento", labels)
    return dict(days)[choice]


@st.fragment(run_every=1)
def _rest_timer(student_id: int) -> None:
    timer = workout_tracker.RestTimer(end_time=local_store.load_rest_timer(student_id).get("end_time"))
    if timer.expired():
        local_store.save_rest_timer(student_id, timer.to_dict())
        st.toast("¡Descanso terminado!")
    elif timer.active:
        st.metric("Descanso", workout_tracker.format_clock(timer.remaining()))
        if st.button("Saltar descanso"):
            timer.stop()
            local_store.save_rest_timer(student_id, timer.to_dict())
            st.rerun()


def _start_rest(student_id: int, exercise: Exercise) -> None:
    timer = workout_tracker.RestTimer()
    timer.start(workout_tracker.rest_seconds_for(exercise))
    local_store.save_rest_timer(student_id, timer.to_dict())


def _set_form(student_id: int, exercises_key: str, exercise: Exercise, workout_set: WorkoutSet) -> None:
    with st.form(f"set_form_{workout_set.id}"):
        col1, col2, col3, col4 = st.columns(4)
        load = col1.text_input("Carga (kg)", value=f"{workout_set.load:g}" if workout_set.load else "")
        reps = col2.text_input("Reps", value=workout_set.reps or "")
        rir = col3.text_input("RIR", value="" if workout_set.actual_rir is None else str(workout_set.actual_rir))
        rpe = col4.text_input("RPE", value="" if workout_set.actual_rpe is None else str(workout_set.actual_rpe))
        notes = st.text_input("Notas", value=workout_set.notes or "")
        status = st.radio(
            "Estado",
            workout_tracker.SET_STATUSES,
            format_func={"completed": "Completada", "failed": "Fallada", "skipped": "Salteada"}.get,
            horizontal=True,
        )
        if not st.form_submit_button("Guardar serie"):
            return
    try:
        payload = workout_tracker.build_set_payload(
            {"load": load, "reps": reps, "actual_rir": rir, "actual_rpe": rpe, "notes": notes}, status
        )
        routine_api.update_set(workout_set.id, payload)
    except FormValidationError as exc:
        st.error(exc.message)
        return
    except ApiError as exc:
        _api_error("Error al guardar la serie", exc)
        return
    st.session_state[exercises_key] = workout_tracker.apply_set_update(
        st.session_state[exercises_key], exercise.id, workout_set.id, payload
    )
    if status == "completed":
        _start_rest(student_id, exercise)
    st.rerun()


def _exercise_history(student: Student, exercise: Exercise) -> None:
    if not exercise.exercise_catalog_id:
        return
    try:
        records = routine_api.get_exercise_history(student.id, exercise.exercise_catalog_id)
    except ApiError as exc:
        _api_error("Error al cargar el historial", exc)
        return
    summary = workout_tracker.summarise_exercise_history(records)
    if not summary["total_sessions"]:
        st.caption("Sin historial para este ejercicio.")
        return
    cols = st.columns(3)
    cols[0].metric("Sesiones", summary["total_sessions"])
    cols[1].metric("Series", summary["total_sets"])
    cols[2].metric("Mejor carga", f"{summary['best_load'] or 0:g} kg")
    df = pd.DataFrame(summary["sessions"])
    st.line_chart(df.iloc[::-1].set_index("date")["max_load"])
    st.dataframe(df, hide_index=True, width="stretch")


def render_workout(student: Student) -> None:
    st.header("Entrenamiento")
    _rest_timer(student.id)
    day = _pick_day(student)
    if day is None:
        return

    exercises_key = f"workout_exercises_{day.id}"
    if exercises_key not in st.session_state:
        try:
            st.session_state[exercises_key] = routine_api.get_day(day.id).exercises
        except ApiError as exc:
            _api_error("Error al cargar el día", exc)
            return
    exercises: List[Exercise] = sorted(st.session_state[exercises_key], key=lambda ex: ex.orden)

    done = workout_tracker.progress(exercises)
    if done["total"]:
        st.progress(done["completed"] / done["total"], text=f"{done['completed']}/{done['total']} series")

    for index, exercise in enumerate(exercises):
        with st.expander(f"{index + 1}. {exercise.display_name}", expanded=index == 0):
            st.caption(
                f"{exercise.series or len(exercise.sets)} x {exercise.repeticiones or '-'}"
                f" · RIR {exercise.rir_esperado or '-'} · descanso {exercise.descanso or '-'}"
            )
            for set_index, workout_set in enumerate(exercise.sets):
                mark = {"completed": "✅", "failed": "❌", "skipped": "⏭️"}.get(workout_set.status, "⬜")
                label = f"{mark} Serie {set_index + 1}{' (extra)' if workout_set.is_extra else ''}"
                with st.popover(label):
                    _set_form(student.id, exercises_key, exercise, workout_set)

            cols = st.columns(2)
            if cols[0].button("Serie extra", key=f"extra_{exercise.id}"):
                try:
                    new_set = routine_api.add_extra_set(exercise.id, workout_tracker.extra_set_payload(exercise))
                    st.session_state[exercises_key] = workout_tracker.append_set(exercises, exercise.id, new_set)
                    st.rerun()
                except FormValidationError as exc:
                    st.warning(exc.message)
                except ApiError as exc:
                    _api_error("Error al agregar la serie", exc)
            others = {ex.id: ex.display_name for ex in exercises if ex.id != exercise.id}
            if others:
                with cols[1].popover("Mover"):
                    target = st.selectbox(
                        "Al lugar de", list(others), format_func=others.get, key=f"move_target_{exercise.id}"
                    )
                    if st.button("Mover", key=f"move_{exercise.id}"):
                        reordered = workout_tracker.move_exercise(
                            exercises, exercise.id, target, routine_api.reorder_exercises
                        )
                        if reordered is exercises:
                            st.error("No se pudo guardar el nuevo orden")
                        else:
                            st.session_state[exercises_key] = [
                                ex.model_copy(update={"orden": i + 1}) for i, ex in enumerate(reordered)
                            ]
                            st.rerun()
            if st.toggle("Ver historial", key=f"history_{exercise.id}"):
                _exercise_history(student, exercise)


# ---------------------------------------------------------------------------
# Steps / weight dashboard
# ---------------------------------------------------------------------------


def _dual_axis_spec(df: pd.DataFrame, x: str) -> Dict[str, Any]:
    steps_low, steps_high = correlation.steps_domain(df["pasos"].dropna())
    weight_low, weight_high = correlation.weight_domain(df["peso"].dropna())
    return {
        "layer": [
            {
                "mark": {"type": "bar", "color": "#4cceac", "opacity": 0.7},
                "encoding": {
                    "x": {"field": x, "type": "ordinal", "sort": None, "title": None},
                    "y": {"field": "pasos", "type": "quantitative", "title": "Pasos", "scale": {"domain": [steps_low, steps_high]}},
                },
            },
            {
                "mark": {"type": "line", "point": True, "color": "#6870fa"},
                "encoding": {
                    "x": {"field": x, "type": "ordinal", "sort": None},
                    "y": {"field": "peso", "type": "quantitative", "title": "Peso (kg)", "scale": {"domain": [weight_low, weight_high]}},
                },
            },
        ],
        "resolve": {"scale": {"y": "independent"}},
    }


def _load_week(student: Student, offset: int, today: date) -> Dict[str, Any]:
    cache = _state(f"correlation_weeks_{student.id}", WeekCache)
    if cache.has(offset):
        return cache.get(offset)
    monday, _ = correlation.week_bounds(today, offset)
    week = {
        "nutrition": nutrition_api.get_weekly_summary(student.id, week_start=monday.isoformat()),
        "weight": health_api.get_weight_daily_week(student.id, offset),
        "steps": cardio_api.get_steps_weekly(student.id, offset),
    }
    # the current week keeps changing, only past weeks are kept
    cache.set(offset, week)
    return week


def render_correlation(student: Student, today: Optional[date] = None) -> None:
    today = today or date.today()
    st.header("Pasos y peso")
    try:
        steps_stats = cardio_api.get_steps_weekly_stats(student.id)
        weight_stats = health_api.get_weight_weekly_stats(student.id)
    except ApiError as exc:
        _api_error("Error al cargar las estadísticas", exc)
        return

    if correlation.has_weekly_data(steps_stats, weight_stats):
        overview = correlation.weekly_overview(steps_stats, weight_stats)
        st.vega_lite_chart(overview, _dual_axis_spec(overview, "name"))
    else:
        st.info("Todavía no hay datos semanales.")

    offset = correlation.clamp_offset(
        st.number_input("Semanas atrás", min_value=0, max_value=correlation.MAX_WEEK_OFFSET, value=0, step=1)
    )
    try:
        week = _load_week(student, offset, today)
    except ApiError as exc:
        _api_error("Error al cargar la semana", exc)
        return

    summary = correlation.week_summary(week["nutrition"], week["weight"], week["steps"], offset, today)
    st.caption(f"Semana {summary['week_number']}: {format_date(summary['week_start'])} al {format_date(summary['week_end'])}")
    cols = st.columns(4)
    cols[0].metric("Calorías prom.", f"{summary['avg_calories'] or 0:.0f}")
    cols[1].metric(
        "Peso prom.",
        f"{summary['avg_weight']:.1f} kg" if summary["avg_weight"] else "-",
        f"{summary['weight_change']:+.1f} kg" if summary["weight_change"] else None,
        delta_color="inverse",
    )
    cols[2].metric("Pasos prom.", f"{summary['avg_steps'] or 0:.0f}")
    cols[3].metric(
        "Objetivo de pasos",
        f"{summary['steps_goal_percent']:.0f}%" if summary["steps_goal_percent"] else "-",
    )

    daily = correlation.daily_overview(week["steps"], week["weight"])
    if not daily.empty:
        st.vega_lite_chart(daily, _dual_axis_spec(daily, "name"))
    st.dataframe(correlation.combined_week(week["nutrition"], week["weight"], week["steps"]), hide_index=True, width="stretch")


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------

STUDENT_PAGES = {
    "Registro diario": None,
    "Sueño": "can_access_weight",
    "Nutrición": "can_access_nutrition",
    "Entrenamiento": "can_access_routine",
    "Cardio": "can_access_cardio",
    "Pasos y peso": "can_access_progress",
    "Mediciones": "can_access_progress",
    "Cuotas": None,
}


def available_pages(student: Student) -> List[str]:
    """Pages the coach granted access to."""
    return [
        page
        for page, permission in STUDENT_PAGES.items()
        if permission is None or getattr(student.permissions, permission)
    ]


def render_student_workspace(page: str, student: Student) -> None:
    if page == "Registro diario":
        render_daily_record(student)
    elif page == "Sueño":
        render_sleep_log(student)
    elif page == "Nutrición":
        render_nutrition_day(student)
    elif page == "Entrenamiento":
        render_workout(student)
    elif page == "Cardio":
        render_cardio(student)
    elif page == "Pasos y peso":
        render_correlation(student)
    elif page == "Mediciones":
        render_student_measurements(student)
    elif page == "Cuotas":
        render_student_fees(student)
