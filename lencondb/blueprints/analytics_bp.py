"""
Analytics blueprint — read-only workload reports (Manager, Admin, Trial).

Endpoints:
    GET /api/v1/analytics/projects-workload?date=&compare_date=
    GET /api/v1/analytics/employee-work-hours?start_date=&end_date=
    GET /api/v1/analytics/export/<report>?format=csv|xlsx  (+ the report's own params)
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, Response, jsonify, request

from lencondb.blueprints import query_date, register_input_errors
from lencondb.middleware.role_guards import manager_or_trial_required
from lencondb.services import analytics_service, export_service
from lencondb.utils.errors import E, api_error

logger = logging.getLogger(__name__)

analytics_bp = register_input_errors(
    Blueprint("analytics", __name__, url_prefix="/api/v1/analytics")
)

_MIMETYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _projects_report() -> dict:
    return analytics_service.projects_workload(
        as_of=query_date("date"),
        compare_date=query_date("compare_date"),
    )


def _employees_report() -> dict:
    return analytics_service.employee_work_hours(
        start=query_date("start_date"),
        end=query_date("end_date"),
    )


_REPORTS = {
    "projects-workload": (_projects_report, export_service.export_projects_workload),
    "employee-work-hours": (_employees_report, export_service.export_employee_work_hours),
}


@analytics_bp.route("/projects-workload", methods=["GET"])
@manager_or_trial_required
def projects_workload():
    return jsonify(_projects_report())


@analytics_bp.route("/employee-work-hours", methods=["GET"])
@manager_or_trial_required
def employee_work_hours():
    return jsonify(_employees_report())


@analytics_bp.route("/export/<report>", methods=["GET"])
@manager_or_trial_required
def export_report(report):
    """
    Download a report as a file.

    Returns:
        Binary file download (csv or xlsx) with Content-Disposition set.
    """
    if report not in _REPORTS:
        return api_error(E.NOT_FOUND, f"Unknown report: {report}")
    fmt = (request.args.get("format") or "xlsx").lower()
    if fmt not in export_service.EXPORT_FORMATS:
        return api_error(
            E.VALIDATION_INVALID,
            f"format must be one of {', '.join(export_service.EXPORT_FORMATS)}",
        )

    build, render = _REPORTS[report]
    payload = render(build(), fmt)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    filename = f"{report}_{stamp}.{fmt}"
    logger.info("Exported %s as %s (%d bytes)", report, fmt, len(payload))
    return Response(
        payload,
        mimetype=_MIMETYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
