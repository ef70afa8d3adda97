from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.validators import require_enum
from ..common.web import current_role, current_user_id, json_body, login_required, manager_required, str_arg
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        s_user = container.auth_service.authenticate(body.get("username", ""), body.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        session["department"] = s_user.department

        return jsonify(
            {
                "user_id": s_user.user_id,
                "full_name": s_user.full_name,
                "role": s_user.role.value,
                "department": s_user.department,
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(container.user_service.get(current_user_id()).to_public())

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @manager_required
    def list_users():
        users = container.user_service.list_employees(current_role=current_role(), department=str_arg("department"))
        return jsonify([u.to_public() for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @manager_required
    def create_user():
        body = json_body()
        user_id = container.user_service.create_account(
            current_role=current_role(),
            full_name=body.get("full_name", ""),
            username=body.get("username", ""),
            password=body.get("password", ""),
            role=require_enum(body.get("role") or Role.EMPLOYEE.value, Role, "Role"),
            department=body.get("department", ""),
            employee_code=body.get("employee_code", ""),
        )
        return jsonify(container.user_service.get(user_id).to_public()), 201

    @app.route("/api/departments", methods=["GET"], endpoint="list_departments")
    @login_required
    def list_departments():
        return jsonify(list(container.user_service.list_departments()))

    @app.route("/api/users/profile", methods=["GET"], endpoint="get_profile")
    @login_required
    def get_profile():
        return jsonify(container.user_service.get(current_user_id()).to_public())

    @app.route("/api/users/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    def update_profile():
        body = json_body()
        user = container.user_service.update_profile(
            current_user_id(),
            full_name=body.get("full_name") or None,
            department=body.get("department"),
        )
        session["name"] = user.full_name
        session["department"] = user.department
        return jsonify(user.to_public())
