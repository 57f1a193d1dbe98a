from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify

from glo_results.errors import ReportNotFoundError
from glo_results.schemas import DateParams

bp = Blueprint("reports", __name__)


@bp.get("/<draw_date>")
def get_report(draw_date: str):
    params = DateParams.model_validate({"date": draw_date})
    generator = current_app.extensions["report_generator"]
    try:
        html = generator.render(params.date)
    except ReportNotFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    return Response(html, mimetype="text/html")
