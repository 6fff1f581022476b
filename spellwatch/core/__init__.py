"""Core module."""
from spellwatch.core.aggregation import apply_reading, summarize_city
from spellwatch.core.clearance import ClearanceRule, clearance_rule
from spellwatch.core.points import PondingPointStore
from spellwatch.core.report import ReportExporter, build_report, format_report
from spellwatch.core.services import Services, build_services
from spellwatch.core.spells import SpellLifecycleController
