from __future__ import annotations

from flask import Flask

from ..container import Container
from ..common.web import admin_required, current_role, fail, json_endpoint, ok, payload


def register(app: Flask, container: Container) -> None:
    settings = container.settings_service

    @app.route("/api/admin/settings", methods=["GET"], endpoint="admin_settings")
    @admin_required
    @json_endpoint
    def admin_settings():
        return ok(settings=settings.get().to_dict(), stats=settings.stats())

    @app.route("/api/admin/settings/password", methods=["PUT"], endpoint="admin_change_password")
    @admin_required
    @json_endpoint
    def admin_change_password():
        data = payload()
        settings.change_admin_password(
            current_role=current_role(),
            new_password=data.get("new_password", ""),
            confirm_password=data.get("confirm_password", ""),
        )
        return ok("Admin password updated successfully")

    @app.route("/api/admin/settings/emails", methods=["PUT"], endpoint="admin_minister_emails")
    @admin_required
    @json_endpoint
    def admin_minister_emails():
        emails = settings.update_minister_emails(current_role=current_role(), emails=payload().get("emails", ""))
        return ok("Minister emails updated", minister_emails=emails)

    @app.route("/api/admin/settings/thresholds", methods=["PUT"], endpoint="admin_thresholds")
    @admin_required
    @json_endpoint
    def admin_thresholds():
        data = payload()
        updated = settings.update_thresholds(
            current_role=current_role(), monthly=data.get("monthly"), quarterly=data.get("quarterly")
        )
        return ok("Absence thresholds updated", settings=updated.to_dict())

    @app.route("/api/admin/settings/max-classes", methods=["PUT"], endpoint="admin_max_classes")
    @admin_required
    @json_endpoint
    def admin_max_classes():
        value = settings.update_max_classes(current_role=current_role(), max_classes=payload().get("max_classes"))
        return ok("Max classes updated", max_classes=value)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        if not settings.check_connection():
            return fail("Database unreachable", 503)
        return ok("Database reachable")
