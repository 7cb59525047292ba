from __future__ import annotations

from flask import Flask, session

from ..container import Container
from ..common.web import admin_required, current_role, json_endpoint, login_required, ok, payload, scoped_class
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    @json_endpoint
    def login():
        data = payload()
        settings = container.settings_service.get()
        user = container.auth_service.authenticate(
            data.get("class_number", ""), data.get("password", ""), settings
        )

        session.clear()
        session["role"] = user.role.value
        session["class_number"] = user.class_number
        session["display_name"] = user.display_name
        return ok("Logged in", user=user.to_dict())

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok("Logged out")

    @app.route("/api/session", endpoint="current_session")
    @login_required
    def current_session():
        return ok(
            user={
                "role": session.get("role"),
                "class_number": session.get("class_number"),
                "display_name": session.get("display_name"),
                "is_admin": session.get("role") == Role.ADMIN.value,
            }
        )

    # --- class leader profile ---

    def _own_class() -> int:
        if current_role() == Role.ADMIN:
            raise AuthorizationError("The administrator has no class leader profile")
        return scoped_class()

    @app.route("/api/profile", methods=["GET"], endpoint="get_profile")
    @login_required
    @json_endpoint
    def get_profile():
        leader = container.leader_service.get_profile(_own_class())
        return ok(profile=leader.to_dict())

    @app.route("/api/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    @json_endpoint
    def update_profile():
        data = payload()
        leader = container.leader_service.update_profile(
            class_number=_own_class(),
            full_name=data.get("full_name", ""),
            email=data.get("email"),
            phone=data.get("phone"),
        )
        if leader.full_name:
            session["display_name"] = leader.full_name
        return ok("Profile updated successfully", profile=leader.to_dict())

    @app.route("/api/profile/password", methods=["POST"], endpoint="change_password")
    @login_required
    @json_endpoint
    def change_password():
        data = payload()
        container.leader_service.change_password(
            class_number=_own_class(),
            current_password=data.get("current_password", ""),
            new_password=data.get("new_password", ""),
            confirm_password=data.get("confirm_password", ""),
        )
        return ok("Password changed successfully")

    # --- admin: class leader accounts ---

    @app.route("/api/admin/leaders", methods=["GET"], endpoint="admin_list_leaders")
    @admin_required
    @json_endpoint
    def admin_list_leaders():
        leaders = container.leader_service.list_leaders(current_role=current_role())
        return ok(leaders=[l.to_dict() for l in leaders])

    @app.route("/api/admin/leaders", methods=["POST"], endpoint="admin_create_leader")
    @admin_required
    @json_endpoint
    def admin_create_leader():
        data = payload()
        leader_id = container.leader_service.create_leader(
            current_role=current_role(),
            settings=container.settings_service.get(),
            username=data.get("username", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name", ""),
            class_number=data.get("class_number"),
            email=data.get("email"),
            phone=data.get("phone"),
        )
        return ok("Class leader created", code=201, id=leader_id)

    @app.route("/api/admin/leaders/<int:leader_id>", methods=["PUT"], endpoint="admin_update_leader")
    @admin_required
    @json_endpoint
    def admin_update_leader(leader_id: int):
        data = payload()
        leader = container.leader_service.update_leader(
            current_role=current_role(),
            settings=container.settings_service.get(),
            leader_id=leader_id,
            username=data.get("username"),
            password=data.get("password"),
            full_name=data.get("full_name"),
            class_number=data.get("class_number"),
            email=data.get("email"),
            phone=data.get("phone"),
            active=data.get("active"),
        )
        return ok("Class leader updated", leader=leader.to_dict())

    @app.route("/api/admin/leaders/<int:leader_id>", methods=["DELETE"], endpoint="admin_delete_leader")
    @admin_required
    @json_endpoint
    def admin_delete_leader(leader_id: int):
        container.leader_service.delete_leader(current_role=current_role(), leader_id=leader_id)
        return ok("Class leader deleted")
