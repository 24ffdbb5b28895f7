"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app, request, send_file
from flask_restx import Namespace, Resource

from zipjit.api.rate_limit_decorator import rate_limit
from zipjit.api.v1.models import (
    error_response,
    job_request,
    job_response,
    job_status_response,
)
from zipjit.domain.errors import (
    ErrorCategory,
    ResolutionError,
    SecurityError,
    ValidationError,
    create_error_response,
)
from zipjit.domain.job_management import JobNotFoundError, JobNotReadyError

# =============================================================================
# Job Namespace - Job management operations
# =============================================================================

job_ns = Namespace("jobs", description="Fetch job operations")


def _job_service():
    return getattr(current_app, "job_service", None)


def _service_unavailable():
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR,
        "Job service not initialized",
        status_code=503
    )


def _not_found(job_id):
    return create_error_response(
        ErrorCategory.JOB_NOT_FOUND,
        f"Job {job_id} not found",
        status_code=404
    )


def _internal_error():
    return create_error_response(ErrorCategory.SYSTEM_ERROR, status_code=500)


def _submitted_url():
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data.get("url")
    return request.form.get("url")


@job_ns.route("")
class JobList(Resource):
    """Submit URLs for fetching"""

    @job_ns.doc("create_job")
    @job_ns.expect(job_request)
    @job_ns.response(202, "Job accepted", job_response)
    @job_ns.response(400, "Bad Request", error_response)
    @job_ns.response(429, "Too Many Requests", error_response)
    @job_ns.response(503, "Service Unavailable", error_response)
    @rate_limit
    def post(self):
        """
        Start a fetch job

        Validates the URL (scheme, DNS and destination address) before
        accepting it. Returns a job_id to poll for progress.
        """
        job_service = _job_service()
        if job_service is None:
            return _service_unavailable()

        try:
            job_data = job_service.submit(_submitted_url())
            return job_data, 202

        except (ValidationError, SecurityError, ResolutionError) as e:
            current_app.logger.info(f"Rejected submission: {e}")
            return create_error_response(e.category, str(e), status_code=400)
        except Exception as e:
            current_app.logger.exception(f"Unexpected error creating job: {e}")
            return _internal_error()


@job_ns.route("/<string:job_id>")
@job_ns.param("job_id", "The job identifier")
class Job(Resource):
    """Job status operations"""

    @job_ns.doc("get_job_status")
    @job_ns.response(200, "Success", job_status_response)
    @job_ns.response(404, "Job Not Found", error_response)
    @job_ns.response(500, "Internal Server Error", error_response)
    def get(self, job_id):
        """
        Get job status and progress

        Poll this endpoint until the status is complete or failed.
        """
        job_service = _job_service()
        if job_service is None:
            return _service_unavailable()

        try:
            return job_service.poll_progress(job_id), 200
        except JobNotFoundError:
            return _not_found(job_id)
        except Exception as e:
            current_app.logger.exception(f"Error getting job status for {job_id}: {e}")
            return _internal_error()

    @job_ns.doc("delete_job")
    @job_ns.response(204, "Job deleted")
    @job_ns.response(404, "Job Not Found", error_response)
    @job_ns.response(500, "Internal Server Error", error_response)
    def delete(self, job_id):
        """
        Delete a job and its archive

        A job that is still running keeps running, but its record is gone
        and it discards its own archive when it notices.
        """
        job_service = _job_service()
        if job_service is None:
            return _service_unavailable()

        try:
            if not job_service.delete_job(job_id):
                return _not_found(job_id)
            return "", 204
        except Exception as e:
            current_app.logger.exception(f"Error deleting job {job_id}: {e}")
            return _internal_error()


@job_ns.route("/<string:job_id>/archive")
@job_ns.param("job_id", "The job identifier")
class JobArchive(Resource):
    """Download the finished archive"""

    @job_ns.doc("download_archive")
    @job_ns.produces(["application/zip"])
    @job_ns.response(200, "Archive content")
    @job_ns.response(404, "Job Not Found", error_response)
    @job_ns.response(409, "Archive Not Ready", error_response)
    def get(self, job_id):
        """
        Download the double-wrapped archive

        The archive is served as ``<job_id>.zip``. Both layers use the
        service's fixed archive password.
        """
        job_service = _job_service()
        if job_service is None:
            return _service_unavailable()

        try:
            handle = job_service.retrieve_archive(job_id)
        except JobNotFoundError:
            return _not_found(job_id)
        except JobNotReadyError:
            return create_error_response(
                ErrorCategory.JOB_NOT_READY,
                f"Job {job_id} has no archive yet",
                status_code=409
            )
        except Exception as e:
            current_app.logger.exception(f"Error retrieving archive for {job_id}: {e}")
            return _internal_error()

        try:
            return send_file(
                handle.path,
                mimetype="application/zip",
                as_attachment=True,
                download_name=handle.download_name,
            )
        except FileNotFoundError:
            # Reaped between lookup and open
            return _not_found(job_id)
