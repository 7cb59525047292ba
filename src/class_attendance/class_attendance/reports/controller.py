from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..common.datetime_utils import parse_iso_date
from ..common.web import json_endpoint, login_required, ok, payload, scoped_class


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/reports/<period_key>", methods=["GET"], endpoint="load_report")
    @login_required
    @json_endpoint
    def load_report(period_key: str):
        class_number = scoped_class(request.args.get("class_number"))
        return ok(class_number=class_number, **reports.load_period(class_number=class_number, period_key=period_key))

    @app.route("/api/reports/<period_key>/records/<int:record_id>", methods=["PUT"], endpoint="update_report_row")
    @login_required
    @json_endpoint
    def update_report_row(period_key: str, record_id: int):
        data = payload()
        record = reports.update_row_totals(
            class_number=scoped_class(data.get("class_number")),
            period_key=period_key,
            record_id=record_id,
            present=data.get("present"),
            absent=data.get("absent"),
            visitors=data.get("visitors"),
        )
        return ok("Attendance totals updated", record=record.to_dict())

    @app.route("/api/reports/<period_key>/summary", methods=["POST"], endpoint="quarterly_summary")
    @login_required
    @json_endpoint
    def quarterly_summary(period_key: str):
        class_number = scoped_class(payload().get("class_number"))
        summary = reports.generate_quarterly_summary(class_number=class_number, period_key=period_key)
        return ok("Quarterly report generated", summary=summary)

    @app.route("/api/reports/<period_key>/status", methods=["GET"], endpoint="report_status")
    @login_required
    @json_endpoint
    def report_status(period_key: str):
        class_number = scoped_class(request.args.get("class_number"))
        status = reports.get_report_status(class_number=class_number, period_key=period_key)
        return ok(status=status.to_dict() if status else None)

    @app.route("/api/reports/<period_key>/confirm", methods=["POST"], endpoint="confirm_report")
    @login_required
    @json_endpoint
    def confirm_report(period_key: str):
        class_number = scoped_class(payload().get("class_number"))
        status, mailto = reports.confirm_quarterly(
            class_number=class_number,
            period_key=period_key,
            settings=container.settings_service.get(),
        )
        return ok("Quarterly report confirmed", status=status.to_dict(), mailto=mailto)

    @app.route("/api/reports/<period_key>/notes", methods=["GET"], endpoint="report_notes")
    @login_required
    @json_endpoint
    def report_notes(period_key: str):
        class_number = scoped_class(request.args.get("class_number"))
        notes = reports.list_notes(class_number=class_number, period_key=period_key)
        return ok(notes={str(k): v for k, v in notes.items()})

    @app.route("/api/reports/<period_key>/notes/<int:member_id>", methods=["PUT"], endpoint="save_report_note")
    @login_required
    @json_endpoint
    def save_report_note(period_key: str, member_id: int):
        data = payload()
        reports.save_note(
            class_number=scoped_class(data.get("class_number")),
            period_key=period_key,
            member_id=member_id,
            note=data.get("note"),
        )
        return ok("Note saved")

    @app.route("/api/reports/<period_key>/absences", methods=["GET"], endpoint="absence_flags")
    @login_required
    @json_endpoint
    def absence_flags(period_key: str):
        class_number = scoped_class(request.args.get("class_number"))
        flags = reports.absence_flags(
            class_number=class_number, period_key=period_key, settings=container.settings_service.get()
        )
        return ok(members=flags)

    # --- manual reports ---

    @app.route("/api/manual-reports", methods=["GET"], endpoint="list_manual_reports")
    @login_required
    @json_endpoint
    def list_manual_reports():
        class_number = scoped_class(request.args.get("class_number"))
        return ok(reports=[r.to_dict() for r in reports.list_manual_reports(class_number)])

    @app.route("/api/manual-reports", methods=["POST"], endpoint="generate_manual_report")
    @login_required
    @json_endpoint
    def generate_manual_report():
        data = payload()
        report = reports.generate_manual_report(
            class_number=scoped_class(data.get("class_number")),
            start_date=parse_iso_date(data.get("start", "")),
            end_date=parse_iso_date(data.get("end", "")),
            absence_types=data.get("absence_types") or [],
        )
        return ok("Manual report generated successfully", code=201, report=report.to_dict())

    @app.route("/api/manual-reports/<int:report_id>", methods=["DELETE"], endpoint="delete_manual_report")
    @login_required
    @json_endpoint
    def delete_manual_report(report_id: int):
        class_number = scoped_class(request.args.get("class_number"))
        reports.delete_manual_report(class_number=class_number, report_id=report_id)
        return ok("Manual report deleted")
