"""Ponding report built from the latest completed spell."""

import json
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Optional

from spellwatch.core.aggregation import local_timezone
from spellwatch.core.spells import SpellLifecycleController
from spellwatch.store.models import Spell
from spellwatch.utils.constants import EMPTY_CELL, NO_PONDING_LABEL, REPORT_FOOTER
from spellwatch.utils.errors import NoReportError


@dataclass
class ReportRow:
    serial: int
    point_id: str
    point_name: str
    ponding: str
    clearance: str
    total_rainfall: float


@dataclass
class SpellReport:
    city_name: str
    spell_id: str
    dated: str
    rain_start: str
    stop_time: str
    reporting_time: str
    rows: list = field(default_factory=list)

    @property
    def title(self) -> str:
        return "Ponding Report"

    @property
    def footer(self) -> str:
        return REPORT_FOOTER.format(city=self.city_name)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "cityName": self.city_name,
            "spellId": self.spell_id,
            "dated": self.dated,
            "rainStart": self.rain_start,
            "stopTime": self.stop_time,
            "reportingTime": self.reporting_time,
            "rows": [
                {
                    "srNo": r.serial,
                    "pointId": r.point_id,
                    "pointName": r.point_name,
                    "ponding": r.ponding,
                    "clearance": r.clearance,
                    "totalRainfall": r.total_rainfall,
                }
                for r in self.rows
            ],
            "footer": self.footer,
        }


def _local(moment: Optional[datetime], tz: tzinfo) -> Optional[datetime]:
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


def _clock_time(moment: Optional[datetime]) -> str:
    return moment.strftime("%I:%M %p") if moment else EMPTY_CELL


def build_report(spell: Spell, tz: Optional[tzinfo] = None) -> SpellReport:
    tz = tz or local_timezone()
    start = _local(spell.start_time, tz)
    end = _local(spell.end_time, tz)

    entries = sorted(spell.spell_data, key=lambda e: e.point_name.lower())
    rows = [
        ReportRow(
            serial=i,
            point_id=e.point_id,
            point_name=e.point_name,
            ponding=f"{e.ponding_level:.1f}" if e.ponding_level > 0 else NO_PONDING_LABEL,
            clearance=e.cleared_in_time or EMPTY_CELL,
            total_rainfall=e.total_rainfall,
        )
        for i, e in enumerate(entries, 1)
    ]

    return SpellReport(
        city_name=spell.city_name,
        spell_id=spell.spell_id,
        dated=end.strftime("%d-%m-%Y") if end else EMPTY_CELL,
        rain_start=_clock_time(start),
        stop_time=_clock_time(end),
        reporting_time=_clock_time(end),
        rows=rows,
    )


class ReportExporter:
    """Reads the latest completed spell of a city and renders it."""

    def __init__(self, spells: SpellLifecycleController, tz: Optional[tzinfo] = None):
        self.spells = spells
        self.tz = tz or local_timezone()

    def latest(self, city_name: str) -> SpellReport:
        spell = self.spells.get_latest_report(city_name)
        if spell is None:
            raise NoReportError(city_name)
        return build_report(spell, self.tz)


class ControlRoomFormatter:
    """Plain-text table for the control room printout."""

    HEADERS = ["Sr No", "Name of Ponding Point", "Ponding at Stop Time (Inches)", "Total Clearance Time"]

    def format(self, report: SpellReport) -> str:
        cells = [[str(r.serial), r.point_name, r.ponding, r.clearance] for r in report.rows]
        widths = [
            max([len(self.HEADERS[i])] + [len(row[i]) for row in cells])
            for i in range(len(self.HEADERS))
        ]

        def line(values: list) -> str:
            return "| " + " | ".join(v.ljust(w) for v, w in zip(values, widths)) + " |"

        rule = "+-" + "-+-".join("-" * w for w in widths) + "-+"
        lines = [
            f"WASA {report.city_name.upper()}",
            f"{report.title} - Dated {report.dated}",
            f"Rain Start: {report.rain_start} | Stop Time: {report.stop_time} | Reporting Time: {report.reporting_time}",
            "",
            rule,
            line(self.HEADERS),
            rule,
        ]
        lines.extend(line(row) for row in cells)
        lines.append(rule)
        lines.extend(["", report.footer])
        return "\n".join(lines)


class JSONFormatter:
    def format(self, report: SpellReport) -> dict:
        return report.to_dict()

    def to_json(self, report: SpellReport) -> str:
        return json.dumps(self.format(report), indent=2, ensure_ascii=False)


def format_report(report: SpellReport, output: str = "text") -> str:
    if output == "json":
        return JSONFormatter().to_json(report)
    return ControlRoomFormatter().format(report)
