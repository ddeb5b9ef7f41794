# Overview: Flask API routes for sales, profit and cash-flow reports; JSON summary and CSV export.

from flask import Blueprint, Response, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..extensions import get_store
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
@require_auth
@require_permission("VIEW_REPORTS")
def summary_report():
    period = request.args.get("period", reporting_service.PERIOD_DAILY)
    include_rows = request.args.get("include_rows", "true").lower() == "true"

    try:
        report = reporting_service.build_report(get_store(), period, g.current_user)
        return jsonify(report.to_dict(include_rows=include_rows)), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/export")
@require_auth
@require_permission("EXPORT_REPORTS")
def export_report():
    period = request.args.get("period", reporting_service.PERIOD_DAILY)

    try:
        filename, content = reporting_service.export_report(get_store(), period, g.current_user)
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
