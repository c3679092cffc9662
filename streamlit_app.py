# Streamlit entrypoint for the Fitcoach app
# Run locally with:
#   streamlit run streamlit_app.py

import logging
import os
from typing import Optional

import streamlit as st
from dotenv import load_dotenv
from pydantic import ValidationError

import backend_client
from coach_api import auth
from coach_api.auth import AuthSession
from coach_pages import COACH_PAGES, render_coach_workspace
from exceptions import ApiError, UnauthorizedError
from logging_setup import setup_logging
from student_pages import available_pages, render_student_workspace

load_dotenv()
setup_logging(os.getenv("FITCOACH_LOG_LEVEL") or st.secrets.get("FITCOACH_LOG_LEVEL", "INFO"))
DEFAULT_EMAIL = os.getenv("FITCOACH_EMAIL") or st.secrets.get("FITCOACH_EMAIL", "")
DEFAULT_PASSWORD = os.getenv("FITCOACH_PASSWORD") or st.secrets.get("FITCOACH_PASSWORD", "")

logger = logging.getLogger("fitcoach.app")

st.set_page_config(page_title="Fitcoach", layout="wide")
# st.session_state resolves to the browser session running this script
backend_client.set_token_provider(lambda: st.session_state.get("auth_token"))


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Datos inválidos")


def _start_session(session: AuthSession, email: str) -> None:
    st.session_state["auth_session"] = session
    st.session_state["auth_token"] = session.token
    st.session_state["auth_email"] = email


def _login_to_backend(email: str, password: str) -> bool:
    """Log in against the API and keep the token in this browser session."""
    try:
        session = auth.login(email, password)
    except ValidationError as exc:
        st.error(_validation_message(exc))
        return False
    except ApiError as exc:
        logger.warning("Login for %s failed: %s", email, exc.message)
        st.error(f"No se pudo iniciar sesión: {exc.message}")
        return False
    if not session.token:
        st.error("No se pudo iniciar sesión: falta el token.")
        return False
    _start_session(session, email)
    st.success("Sesión iniciada.")
    return True


def _register_backend(email: str, password: str, full_name: str) -> bool:
    """Create a student account and sign in with it."""
    try:
        session = auth.register(email, password, full_name)
    except ValidationError as exc:
        st.error(_validation_message(exc))
        return False
    except ApiError as exc:
        logger.warning("Registration for %s failed: %s", email, exc.message)
        st.error(f"No se pudo crear la cuenta: {exc.message}")
        return False
    _start_session(session, email)
    st.success("Cuenta creada.")
    return True


def _sign_out() -> None:
    for key in ("auth_session", "auth_token", "auth_email"):
        st.session_state.pop(key, None)


def _choose_profile(session: AuthSession) -> Optional[str]:
    """Accounts with both a coach and a student profile pick one per session."""
    if not session.has_multiple_profiles:
        return session.user_type
    choice = st.radio(
        "Perfil",
        ["coach", "student"],
        format_func={"coach": "Coach", "student": "Alumno"}.get,
        horizontal=True,
        key="profile_choice",
    )
    session.user_type = choice
    return choice


with st.sidebar:
    st.title("Fitcoach")
    st.subheader("Cuenta")
    if "auth_session" not in st.session_state:
        auth_mode = st.radio("Modo", ["Ingresar", "Registrarse"], horizontal=True, key="auth_mode")
        if auth_mode == "Ingresar":
            login_email = st.text_input("Email", value=DEFAULT_EMAIL, key="login_email")
            login_password = st.text_input(
                "Contraseña", type="password", value=DEFAULT_PASSWORD, key="login_password"
            )
            if st.button("Ingresar", key="login_button"):
                if _login_to_backend(login_email, login_password):
                    st.rerun()
        else:
            reg_name = st.text_input("Nombre completo", key="register_name")
            reg_email = st.text_input("Email", value="", key="register_email")
            reg_password = st.text_input("Contraseña", type="password", value="", key="register_password")
            if st.button("Crear cuenta", key="register_button"):
                if _register_backend(reg_email, reg_password, reg_name):
                    st.rerun()
    else:
        st.write(f"Sesión de {st.session_state.get('auth_email', '')}")
        if st.button("Cerrar sesión", key="logout_button"):
            _sign_out()
            st.rerun()

    session: Optional[AuthSession] = st.session_state.get("auth_session")
    user_type = None
    mode = None
    if session is not None:
        user_type = _choose_profile(session)
        if user_type in ("coach", "admin", "superadmin"):
            mode = st.radio("Sección", options=COACH_PAGES, index=0)
        elif user_type == "student" and session.student is not None:
            mode = st.radio("Sección", options=available_pages(session.student), index=0)
        else:
            st.warning("Tu cuenta no tiene un perfil de coach ni de alumno.")
    else:
        st.info("Ingresá para usar la app.")

if session is None or mode is None:
    st.stop()

try:
    if user_type == "student":
        render_student_workspace(mode, session.student)
    else:
        render_coach_workspace(mode, session.user.id)
except UnauthorizedError:
    # token revoked mid-session
    _sign_out()
    st.warning("Tu sesión expiró. Volvé a ingresar.")
    st.stop()
