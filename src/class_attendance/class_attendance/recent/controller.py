from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..common.web import current_role, json_endpoint, login_required, ok, scoped_class
from ..core.enums import Role, ServiceType
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/recent", methods=["GET"], endpoint="recent_attendance")
    @login_required
    @json_endpoint
    def recent_attendance():
        requested = request.args.get("class_number")
        if current_role() == Role.ADMIN and not requested:
            class_number = None
        else:
            class_number = scoped_class(requested)

        week = request.args.get("week")
        try:
            week = int(week) if week else None
        except ValueError:
            raise ValidationError(f"Invalid week: {week!r}")

        view = container.recent_service.view(
            class_number=class_number,
            year=request.args.get("year") or None,
            month=request.args.get("month") or None,
            week=week,
            service_filter=request.args.get("filter") or ServiceType.BIBLE_STUDY.value,
        )
        return ok(**view.to_dict())
