from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_role, current_user_id, int_arg, json_body, login_required, manager_required, str_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leaves", methods=["POST"], endpoint="apply_leave")
    @login_required
    def apply_leave():
        body = json_body()
        leave = service.apply(
            user_id=current_user_id(),
            leave_type=body.get("leave_type", ""),
            reason=body.get("reason", ""),
            start_date=body.get("start_date", ""),
            end_date=body.get("end_date", ""),
        )
        return jsonify(leave.to_dict()), 201

    @app.route("/api/leaves/mine", methods=["GET"], endpoint="my_leaves")
    @login_required
    def my_leaves():
        return jsonify([lv.to_dict() for lv in service.list_my_requests(user_id=current_user_id())])

    @app.route("/api/leaves/pending", methods=["GET"], endpoint="pending_leaves")
    @manager_required
    def pending_leaves():
        return jsonify(service.with_requesters(service.list_pending(current_role=current_role())))

    @app.route("/api/leaves", methods=["GET"], endpoint="all_leaves")
    @manager_required
    def all_leaves():
        leaves = service.list_all(
            current_role=current_role(),
            status=str_arg("status"),
            user_id=int_arg("user_id"),
            start_date=str_arg("start"),
            end_date=str_arg("end"),
        )
        return jsonify(service.with_requesters(leaves))

    @app.route("/api/leaves/stats", methods=["GET"], endpoint="leave_stats")
    @manager_required
    def leave_stats():
        return jsonify(service.stats(current_role=current_role()))

    @app.route("/api/leaves/<int:leave_id>/decide", methods=["POST"], endpoint="decide_leave")
    @manager_required
    def decide_leave(leave_id: int):
        body = json_body()
        leave = service.decide(
            leave_id=leave_id,
            decided_by=current_user_id(),
            outcome=body.get("outcome", ""),
            comment=body.get("comment", ""),
            current_role=current_role(),
        )
        return jsonify(leave.to_dict())

    @app.route("/api/leaves/<int:leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @manager_required
    def approve_leave(leave_id: int):
        leave = service.approve(
            leave_id=leave_id,
            decided_by=current_user_id(),
            comment=json_body().get("comment", ""),
            current_role=current_role(),
        )
        return jsonify(leave.to_dict())

    @app.route("/api/leaves/<int:leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @manager_required
    def reject_leave(leave_id: int):
        leave = service.reject(
            leave_id=leave_id,
            decided_by=current_user_id(),
            comment=json_body().get("comment", ""),
            current_role=current_role(),
        )
        return jsonify(leave.to_dict())
