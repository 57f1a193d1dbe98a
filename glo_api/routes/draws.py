from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from glo_results.schemas import (
    DateParams,
    DateRangeParams,
    LatestParams,
    MonthParams,
    NumberParams,
    YearParams,
)
from glo_results.store import ResultStore

bp = Blueprint("draws", __name__)


def _store() -> ResultStore:
    return current_app.extensions["result_store"]


@bp.get("")
def list_draws():
    args = request.args
    store = _store()
    if "start" in args or "end" in args:
        params = DateRangeParams.model_validate({"start_date": args.get("start"), "end_date": args.get("end")})
        records = store.get_by_date_range(params.start_date, params.end_date)
    elif "month" in args:
        month_params = MonthParams.model_validate({"year": args.get("year"), "month": args.get("month")})
        records = store.get_by_month(month_params.year, month_params.month)
    elif "year" in args:
        year_params = YearParams.model_validate({"year": args.get("year")})
        records = store.get_by_year(year_params.year)
    else:
        records = store.list_all()
    return jsonify([record.to_dict() for record in records])


@bp.get("/latest")
def latest_draws():
    params = LatestParams.model_validate(request.args.to_dict())
    records = _store().get_latest(params.limit)
    return jsonify([record.to_dict() for record in records])


@bp.get("/search")
def search_number():
    params = NumberParams.model_validate({"number": request.args.get("number")})
    matches = _store().search_number(params.number)
    return jsonify([{"draw": draw.to_dict(), "prize": prize.to_dict()} for draw, prize in matches])


@bp.get("/<draw_date>")
def get_draw(draw_date: str):
    params = DateParams.model_validate({"date": draw_date})
    complete = _store().get_complete(params.date)
    if complete is None:
        return jsonify({"error": "draw not found"}), 404
    return jsonify(complete.to_dict())
