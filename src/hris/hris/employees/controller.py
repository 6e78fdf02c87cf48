from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.pagination import PageRequest
from ..common.validators import as_bool, optional_int, require_choice
from ..common.web import current_user, json_body, login_required, management_required, require_query_id
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        s_user = container.auth_service.authenticate(
            body.get("username") or body.get("email") or "",
            body.get("password") or "",
        )

        session.clear()
        session.permanent = as_bool(body.get("remember"))
        session["user_id"] = s_user.user_id
        session["company_id"] = s_user.company_id
        session["role"] = s_user.role.value
        session["name"] = s_user.name

        return jsonify(
            {
                "message": "Logged in",
                "user": {"id": s_user.user_id, "name": s_user.name, "role": s_user.role.value, "companyId": s_user.company_id},
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/auth/session", methods=["GET"], endpoint="auth_session")
    @login_required
    def auth_session():
        user = current_user()
        return jsonify({"id": user.user_id, "name": user.name, "role": user.role.value, "companyId": user.company_id})

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @management_required
    def employees_list():
        args = request.args
        if args.get("id"):
            return jsonify(container.employee_service.get(current_user(), require_query_id()).to_dict())

        page = PageRequest.from_args(args.get("page"), args.get("limit"))
        result = container.employee_service.list(
            current_user(),
            page=page,
            search=args.get("search") or args.get("q"),
            department_id=optional_int(args.get("departmentId"), "departmentId"),
        )
        return jsonify({"data": [e.to_dict() for e in result.items], "metadata": result.metadata()})

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @management_required
    def employees_create():
        employee = container.employee_service.create(current_user(), json_body())
        return jsonify({"message": "Employee created", "employee": employee.to_dict()}), 201

    @app.route("/api/employees", methods=["PUT"], endpoint="employees_update")
    @management_required
    def employees_update():
        body = json_body()
        employee_id = optional_int(body.get("id"), "id") or require_query_id()
        employee = container.employee_service.update(current_user(), employee_id, body)
        return jsonify({"message": "Employee updated", "employee": employee.to_dict()})

    @app.route("/api/employees", methods=["DELETE"], endpoint="employees_delete")
    @management_required
    def employees_delete():
        container.employee_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Employee deleted"})

    @app.route("/api/employees/bulk-update", methods=["POST"], endpoint="employees_bulk_update")
    @management_required
    def employees_bulk_update():
        changes = container.employee_service.bulk_update_salary(current_user(), json_body())
        return jsonify({"message": f"Base salary updated for {changes} employees", "changes": changes})

    @app.route("/api/admins", methods=["GET"], endpoint="admins_list")
    @management_required
    def admins_list():
        role = require_choice(request.args.get("role") or Role.ADMIN.value, "role", Role)
        users = container.account_service.list(current_user(), role)
        return jsonify({"data": [u.to_dict() for u in users]})

    @app.route("/api/admins", methods=["POST"], endpoint="admins_create")
    @management_required
    def admins_create():
        created = container.account_service.create(current_user(), json_body())
        return jsonify({"message": "Account created", "user": created.to_dict()}), 201

    @app.route("/api/admins", methods=["DELETE"], endpoint="admins_delete")
    @management_required
    def admins_delete():
        role = require_choice(request.args.get("role") or Role.ADMIN.value, "role", Role)
        container.account_service.delete(current_user(), require_query_id(), role)
        return jsonify({"message": "Account deleted"})
