from __future__ import annotations

import logging

from flask import Flask, session

from ..common.http import current_actor, json_body, login_required, ok, remember_actor
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        actor = container.auth_service.authenticate(data.get("loginId", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("rememberMe"))
        remember_actor(actor)

        logger.info("User %s logged in as %s", actor.user_id, actor.role.value)
        return ok({"userId": actor.user_id, "role": actor.role.value, "name": actor.full_name})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        actor = current_actor()
        return ok({"userId": actor.user_id, "role": actor.role.value, "name": actor.full_name})
