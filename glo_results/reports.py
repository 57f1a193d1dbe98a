from __future__ import annotations

import datetime as dt
import logging
import pathlib
from typing import Dict, List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from .errors import ReportNotFoundError
from .store import ResultStore

CATEGORY_DISPLAY_NAMES = {
    "first": "รางวัลที่ 1",
    "second": "รางวัลที่ 2",
    "third": "รางวัลที่ 3",
    "fourth": "รางวัลที่ 4",
    "fifth": "รางวัลที่ 5",
    "last2": "รางวัลท้าย 2 ตัว",
    "last3f": "รางวัลท้าย 3 ตัว (หน้า)",
    "last3b": "รางวัลท้าย 3 ตัว (หลัง)",
    "near1": "รางวัลใกล้เคียงรางวัลที่ 1",
}

# Display order differs from storage order: near1 follows the first prize.
REPORT_CATEGORY_ORDER = (
    "first",
    "near1",
    "second",
    "third",
    "fourth",
    "fifth",
    "last3f",
    "last3b",
    "last2",
)

SPECIAL_CATEGORIES = {"near1", "last2", "last3f", "last3b"}


def category_display_name(category: str) -> str:
    return CATEGORY_DISPLAY_NAMES.get(category, category)


def format_prize_amount(amount: str) -> str:
    try:
        return f"{float(amount):.0f} บาท"
    except ValueError:
        return f"{amount} บาท"


def report_filename(draw_date: str) -> str:
    return f"lottery_report_{draw_date}.html"


def _section_class(category: str) -> str:
    if category == "first":
        return "prize-section first-prize"
    if category in SPECIAL_CATEGORIES:
        return "prize-section special-prize"
    return "prize-section"


class ReportGenerator:
    def __init__(
        self,
        store: ResultStore,
        report_dir: str = "reports",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._report_dir = pathlib.Path(report_dir)
        self._logger = logger or logging.getLogger("glo_results.reports")
        self._env = Environment(
            loader=PackageLoader("glo_results", "templates"),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, draw_date: str) -> str:
        complete = self._store.get_complete(draw_date)
        if complete is None:
            raise ReportNotFoundError(draw_date)

        groups: Dict[str, List] = {}
        for prize in complete.prizes:
            groups.setdefault(prize.category, []).append(prize)

        sections = []
        for category in REPORT_CATEGORY_ORDER:
            numbers = groups.get(category)
            if not numbers:
                continue
            sections.append(
                {
                    "css_class": _section_class(category),
                    "title": category_display_name(category),
                    "amount": format_prize_amount(numbers[0].prize_amount),
                    "numbers": sorted(numbers, key=lambda n: n.round_number),
                }
            )

        template = self._env.get_template("report.html")
        return template.render(
            draw=complete.draw,
            sections=sections,
            prize_count=len(complete.prizes),
            category_count=len(groups),
            generated_at=dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )

    def save(self, draw_date: str) -> pathlib.Path:
        html = self.render(draw_date)
        self._report_dir.mkdir(parents=True, exist_ok=True)
        path = self._report_dir / report_filename(draw_date)
        path.write_text(html, encoding="utf-8")
        self._logger.info("Report for %s written to %s", draw_date, path)
        return path
