from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.pagination import PageRequest
from ..common.validators import optional_int
from ..common.web import current_user, json_body, login_required, management_required, require_query_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _target_id(body: dict) -> int:
        return optional_int(body.get("id"), "id") or require_query_id()

    @app.route("/api/recruitment/jobs", methods=["GET"], endpoint="jobs_list")
    @login_required
    def jobs_list():
        user = current_user()
        if request.args.get("id"):
            return jsonify(container.job_service.get(user, require_query_id()).to_dict())
        page = container.job_service.list(
            user,
            page=PageRequest.from_args(request.args.get("page"), request.args.get("limit")),
            q=request.args.get("q"),
            status=request.args.get("status"),
            sort=request.args.get("sort"),
        )
        return jsonify({"data": [j.to_dict() for j in page.items], "metadata": page.metadata()})

    @app.route("/api/recruitment/jobs", methods=["POST"], endpoint="jobs_create")
    @management_required
    def jobs_create():
        job = container.job_service.create(current_user(), json_body())
        return jsonify(job.to_dict()), 201

    @app.route("/api/recruitment/jobs", methods=["PUT"], endpoint="jobs_update")
    @management_required
    def jobs_update():
        body = json_body()
        job = container.job_service.update(current_user(), _target_id(body), body)
        return jsonify(job.to_dict())

    @app.route("/api/recruitment/jobs", methods=["DELETE"], endpoint="jobs_delete")
    @management_required
    def jobs_delete():
        container.job_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Job posting deleted"})

    @app.route("/api/recruitment/applicants", methods=["GET"], endpoint="applicants_list")
    @management_required
    def applicants_list():
        user = current_user()
        if request.args.get("id"):
            return jsonify(container.applicant_service.get(user, require_query_id()).to_dict())
        applicants = container.applicant_service.list(
            user,
            job_id=optional_int(request.args.get("jobId"), "jobId"),
            status=request.args.get("status"),
        )
        return jsonify([a.to_dict() for a in applicants])

    @app.route("/api/recruitment/applicants", methods=["POST"], endpoint="applicants_create")
    @management_required
    def applicants_create():
        applicant = container.applicant_service.create(current_user(), json_body())
        return jsonify(applicant.to_dict()), 201

    @app.route("/api/recruitment/applicants", methods=["PUT"], endpoint="applicants_update")
    @management_required
    def applicants_update():
        body = json_body()
        applicant = container.applicant_service.update(current_user(), _target_id(body), body)
        return jsonify(applicant.to_dict())

    @app.route("/api/recruitment/applicants", methods=["DELETE"], endpoint="applicants_delete")
    @management_required
    def applicants_delete():
        container.applicant_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Applicant deleted"})
