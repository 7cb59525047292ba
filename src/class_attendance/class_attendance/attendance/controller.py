from __future__ import annotations

from flask import Flask, request, session

from ..container import Container
from ..common.datetime_utils import parse_iso_date
from ..common.web import json_endpoint, login_required, ok, payload, scoped_class
from .service import parse_service_type, parse_status_map


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/existing", methods=["GET"], endpoint="existing_attendance")
    @login_required
    @json_endpoint
    def existing_attendance():
        class_number = scoped_class(request.args.get("class_number"))
        attendance_date = parse_iso_date(request.args.get("date", ""))
        service_type = parse_service_type(request.args.get("service_type"))

        record = container.attendance_service.get_existing(
            class_number=class_number, attendance_date=attendance_date, service_type=service_type
        )
        if not record:
            return ok(record=None, statuses={})

        statuses = container.attendance_service.member_statuses(record.attendance_id)
        return ok(record=record.to_dict(), statuses={str(m.member_id): m.status.value for m in statuses})

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    @json_endpoint
    def mark_attendance():
        data = payload()
        class_number = scoped_class(data.get("class_number"))
        statuses = parse_status_map(data.get("statuses") or {})
        visitors = data.get("visitors")

        attendance_id = container.attendance_service.mark_attendance(
            class_number=class_number,
            attendance_date=parse_iso_date(data.get("date", "")),
            service_type=parse_service_type(data.get("service_type")),
            statuses=statuses,
            class_leader_name=session.get("display_name"),
            visitors=None if visitors in (None, "") else visitors,
        )
        stats = container.attendance_service.stats(statuses)
        return ok("Attendance saved successfully", id=attendance_id, stats=stats.to_dict())

    @app.route("/api/attendance/records", methods=["GET"], endpoint="attendance_records")
    @login_required
    @json_endpoint
    def attendance_records():
        class_number = scoped_class(request.args.get("class_number"))
        return ok(class_number=class_number, **container.attendance_service.records_overview(class_number))

    @app.route("/api/attendance/records/<int:record_id>/members", methods=["GET"], endpoint="record_members")
    @login_required
    @json_endpoint
    def record_members(record_id: int):
        record = container.attendance_service.get_record(record_id)
        scoped_class(record.class_number)
        statuses = container.attendance_service.member_statuses(record_id)
        return ok(record=record.to_dict(), statuses={str(m.member_id): m.status.value for m in statuses})

    @app.route("/api/attendance/records/<int:record_id>/members", methods=["PUT"], endpoint="edit_record_members")
    @login_required
    @json_endpoint
    def edit_record_members(record_id: int):
        record = container.attendance_service.get_record(record_id)
        scoped_class(record.class_number)

        edits = parse_status_map(payload().get("statuses") or {})
        updated = container.attendance_service.edit_record(record_id, edits)
        return ok("Attendance updated successfully", record=updated.to_dict())
