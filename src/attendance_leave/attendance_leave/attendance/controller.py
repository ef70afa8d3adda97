from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_role, current_user_id, int_arg, login_required, manager_required, str_arg
from ..container import Container
from ..reports.export import csv_bytes
from ..reports.service import Viewer
from .model import AttendanceRecord, TodayStatus


def _fmt(value, pattern: str = "%H:%M:%S"):
    return value.strftime(pattern) if value else None


def _record_json(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "user_id": r.user_id,
        "date": r.work_date.isoformat(),
        "check_in_time": _fmt(r.check_in_time),
        "check_out_time": _fmt(r.check_out_time),
        "status": r.status.value,
        "leave_type": r.leave_type,
        "total_hours": str(r.total_hours),
    }


def _today_json(t: TodayStatus) -> dict:
    return {
        "user_id": t.user_id,
        "date": t.work_date.isoformat(),
        "status": t.status.value,
        "has_record": t.has_record,
        "checked_in": t.checked_in,
        "checked_out": t.checked_out,
        "check_in_time": _fmt(t.check_in_time),
        "check_out_time": _fmt(t.check_out_time),
        "total_hours": str(t.total_hours),
        "leave_type": t.leave_type,
    }


def register(app: Flask, container: Container) -> None:
    def viewer() -> Viewer:
        return Viewer(user_id=current_user_id(), role=current_role())

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        record = container.attendance_service.check_in(current_user_id())
        return jsonify({"message": "Checked in", "attendance": _record_json(record)}), 201

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        record = container.attendance_service.check_out(current_user_id())
        return jsonify({"message": "Checked out", "attendance": _record_json(record)})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        return jsonify(_today_json(container.attendance_service.today_status(current_user_id())))

    @app.route("/api/attendance/date/<day>", methods=["GET"], endpoint="attendance_day")
    @login_required
    def attendance_day(day: str):
        user_id = int_arg("user_id", current_user_id())
        resolved = container.report_service.day_detail(viewer=viewer(), user_id=user_id, day=parse_iso_date(day))
        return jsonify(resolved.to_dict())

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        start = str_arg("start")
        end = str_arg("end")
        days = container.report_service.history(
            viewer=viewer(),
            user_id=int_arg("user_id", current_user_id()),
            start=parse_iso_date(start) if start else None,
            end=parse_iso_date(end) if end else None,
            limit=int_arg("limit", 30),
        )
        return jsonify([d.to_dict() for d in days])

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary():
        today = container.clock.today()
        return jsonify(
            container.report_service.monthly_summary(
                viewer=viewer(),
                user_id=int_arg("user_id", current_user_id()),
                year=int_arg("year", today.year),
                month=int_arg("month", today.month),
            )
        )

    @app.route("/api/attendance/team-summary", methods=["GET"], endpoint="team_summary")
    @manager_required
    def team_summary():
        today = container.clock.today()
        return jsonify(
            container.report_service.team_summary(
                current_role=current_role(),
                year=int_arg("year", today.year),
                month=int_arg("month", today.month),
                department=str_arg("department"),
            )
        )

    @app.route("/api/attendance/export.csv", methods=["GET"], endpoint="attendance_export")
    @manager_required
    def attendance_export():
        today = container.clock.today()
        start = parse_iso_date(str_arg("start") or today.replace(day=1).isoformat())
        end = parse_iso_date(str_arg("end") or today.isoformat())

        rows = container.report_service.export_rows(
            current_role=current_role(),
            start=start,
            end=end,
            department=str_arg("department"),
            user_id=int_arg("user_id"),
        )
        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            csv_bytes(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
