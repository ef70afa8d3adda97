from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_role, current_user_id, int_arg, login_required, manager_required, str_arg
from ..container import Container
from .service import Viewer


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/calendar/<int:year>/<int:month>", methods=["GET"], endpoint="calendar_month")
    @login_required
    def calendar_month(year: int, month: int):
        days = reports.calendar_month(
            viewer=Viewer(user_id=current_user_id(), role=current_role()),
            user_id=int_arg("user_id", current_user_id()),
            year=year,
            month=month,
        )
        return jsonify(days)

    @app.route("/api/calendar/<int:year>/<int:month>/all", methods=["GET"], endpoint="team_calendar")
    @manager_required
    def team_calendar(year: int, month: int):
        return jsonify(
            reports.team_calendar(
                current_role=current_role(),
                year=year,
                month=month,
                user_id=int_arg("user_id"),
                department=str_arg("department"),
            )
        )

    @app.route("/api/dashboard/employee", methods=["GET"], endpoint="employee_dashboard")
    @login_required
    def employee_dashboard():
        return jsonify(reports.employee_dashboard(user_id=current_user_id()))

    @app.route("/api/dashboard/manager", methods=["GET"], endpoint="manager_dashboard")
    @manager_required
    def manager_dashboard():
        return jsonify(reports.manager_dashboard(current_role=current_role()))
