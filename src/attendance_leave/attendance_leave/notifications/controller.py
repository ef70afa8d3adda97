from __future__ import annotations

from flask import Flask, jsonify

from ..common.validators import require_enum
from ..common.web import (
    bool_arg,
    current_role,
    current_user_id,
    int_arg,
    json_body,
    login_required,
    manager_required,
    str_arg,
)
from ..container import Container
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationCategory


def register(app: Flask, container: Container) -> None:
    service = container.notification_service

    @app.route("/api/notifications", methods=["GET"], endpoint="list_notifications")
    @login_required
    def list_notifications():
        category = str_arg("category")
        items = service.list_for_user(
            current_user_id(),
            category=require_enum(category, NotificationCategory, "Category") if category else None,
            unread_only=bool_arg("unread_only"),
            limit=int_arg("limit", DEFAULT_NOTIFICATION_LIMIT),
        )
        return jsonify([n.to_dict() for n in items])

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="unread_notifications")
    @login_required
    def unread_notifications():
        return jsonify({"count": service.unread_count(current_user_id())})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="read_notification")
    @login_required
    def read_notification(notification_id: int):
        return jsonify(service.mark_read(current_user_id(), notification_id).to_dict())

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="read_all_notifications")
    @login_required
    def read_all_notifications():
        return jsonify({"updated": service.mark_all_read(current_user_id())})

    @app.route("/api/notifications/broadcast", methods=["POST"], endpoint="broadcast_notice")
    @manager_required
    def broadcast_notice():
        body = json_body()
        count = service.broadcast(
            sender_id=current_user_id(),
            target_group=body.get("target_group", ""),
            message=body.get("message", ""),
            title=body.get("title"),
            current_role=current_role(),
        )
        return jsonify({"message": "Notice sent", "recipients_count": count}), 201
