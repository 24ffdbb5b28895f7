"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields

from zipjit.api.v1 import api

JOB_STATUSES = ["pending", "downloading", "zipping", "complete", "failed"]

# =============================================================================
# Request Models
# =============================================================================

job_request = api.model(
    "JobRequest",
    {
        "url": fields.String(
            required=True,
            description="http(s) URL of the file to fetch",
            example="https://example.com/files/report.pdf",
        )
    },
)

# =============================================================================
# Response Models
# =============================================================================

job_response = api.model(
    "JobResponse",
    {
        "job_id": fields.String(description="Unique job identifier"),
        "status": fields.String(description="Job status", enum=JOB_STATUSES),
        "message": fields.String(description="Status message"),
    },
)

job_status_response = api.model(
    "JobStatusResponse",
    {
        "job_id": fields.String(description="Job identifier"),
        "status": fields.String(description="Job status", enum=JOB_STATUSES),
        "progress": fields.Integer(
            description="Download progress percentage (0-100)", min=0, max=100
        ),
        "bytes_downloaded": fields.Integer(description="Bytes received so far"),
        "total_bytes": fields.Integer(
            description="Declared size, null when the server sent none", allow_null=True
        ),
        "status_text": fields.String(description="Human-readable phase"),
        "original_md5": fields.String(
            description="MD5 of the fetched bytes once downloaded", allow_null=True
        ),
        "filename": fields.String(description="Name of the file inside the inner archive"),
        "error": fields.String(description="Error message if failed", allow_null=True),
        "error_category": fields.String(
            description="Error category if failed", allow_null=True
        ),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing explanation"),
        "action": fields.String(description="Suggested next step"),
        "details": fields.String(description="Additional error details", allow_null=True),
    },
)
