"""Session and JSON helpers shared by the feature controllers."""

from __future__ import annotations

from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..users.model import Actor

STAFF_ROLES = (Role.ADMIN, Role.TEACHER)
LEARNER_ROLES = (Role.STUDENT, Role.PARENT)


def remember_actor(actor: Actor) -> None:
    session["user_id"] = actor.user_id
    session["role"] = actor.role.value
    session["name"] = actor.full_name


def current_actor() -> Actor:
    if "user_id" not in session:
        raise AuthenticationError("Please log in to continue")
    try:
        role = Role(session.get("role"))
    except ValueError:
        session.clear()
        raise AuthenticationError("Session is no longer valid")
    return Actor(user_id=int(session["user_id"]), role=role, full_name=session.get("name") or "")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_actor()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role, hide_as: Optional[str] = None):
    """Only let the given roles through.

    Other roles get a 403, or a 404 carrying ``hide_as`` when it is set, so the
    route does not tell them whether the resource exists.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_actor().role not in roles:
                if hide_as is not None:
                    raise NotFoundError(hide_as)
                raise AuthorizationError("You do not have permission to do this")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status
