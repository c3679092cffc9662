from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import backend_client

from .schemas import Coach, LoginForm, Student, User

logger = logging.getLogger("fitcoach.auth")


@dataclass
class AuthSession:
    token: Optional[str]
    user: Optional[User]
    student: Optional[Student] = None
    coach: Optional[Coach] = None
    user_type: Optional[str] = None
    # coach + student on the same account: the UI asks which one to use
    has_multiple_profiles: bool = False


def resolve_user_type(declared: Optional[str], user: Optional[User], has_student: bool) -> Optional[str]:
    """Use the server's userType, otherwise derive it from the role names."""
    if declared:
        return declared
    if user is None:
        return None
    roles = {role.name for role in user.roles}
    if "superadmin" in roles:
        return "superadmin"
    if "admin" in roles:
        return "admin"
    if "coach" in roles:
        return "coach"
    if "user" in roles and has_student:
        return "student"
    return None


def session_from_payload(payload: Dict[str, Any], token: Optional[str] = None) -> AuthSession:
    """Build an AuthSession from a /auth/login or /auth/check-status body."""
    profiles = payload.get("profiles") or {}
    user = None
    if payload.get("id") is not None:
        user = User.model_validate(
            {
                "id": payload.get("id"),
                "email": payload.get("email", ""),
                "fullName": payload.get("fullName"),
                "isActive": payload.get("isActive", True),
                "roles": payload.get("roles") or [],
            }
        )
    elif isinstance(payload.get("user"), dict):
        user = User.model_validate(payload["user"])

    student_raw = profiles.get("student") or payload.get("student")
    coach_raw = profiles.get("coach")
    student = Student.model_validate(student_raw) if student_raw else None
    coach = Coach.model_validate(coach_raw) if coach_raw else None

    multiple = bool(payload.get("hasMultipleProfiles"))
    user_type = None if multiple else resolve_user_type(payload.get("userType"), user, student is not None)

    return AuthSession(
        token=token or payload.get("token"),
        user=user,
        student=student,
        coach=coach,
        user_type=user_type,
        has_multiple_profiles=multiple,
    )


def login(email: str, password: str) -> AuthSession:
    """Log in; the caller keeps the returned token in its own session."""
    form = LoginForm(email=email, password=password)
    payload = backend_client.post(
        "/auth/login",
        json={"email": form.email, "password": form.password},
    ) or {}
    session = session_from_payload(payload)
    logger.info("Signed in as %s (%s)", form.email, session.user_type or "profile selection")
    return session


def register(email: str, password: str, full_name: str) -> AuthSession:
    form = LoginForm(email=email, password=password)
    payload = backend_client.post(
        "/auth/register",
        json={"email": form.email, "password": form.password, "fullName": full_name},
    ) or {}
    session = session_from_payload(payload)
    # fresh accounts start as students
    session.user_type = session.user_type or "student"
    return session


def check_status(token: Optional[str]) -> AuthSession:
    """Revalidate a token; raises UnauthorizedError when it expired."""
    payload = backend_client.get("/auth/check-status", token=token) or {}
    return session_from_payload(payload, token=payload.get("token") or token)


def me() -> AuthSession:
    """Profile behind the token the client resolves for the current caller."""
    return check_status(backend_client.get_token())
