"""evalascendente package for upward (bottom-up) supervisor evaluations."""

from .aggregation import aggregate, completion_progress, summarize_by_evaluated
from .classifier import classify_competency, classify_point, classify_text
from .config import load_config
from .criteria import default_catalog, load_catalog
from .loader import load_data
from .logging_utils import setup_logging
from .record import record_response
from .report import build_report, export_report, render_report
from .status import classify_status

__all__ = [
    "aggregate",
    "build_report",
    "classify_competency",
    "classify_point",
    "classify_status",
    "classify_text",
    "completion_progress",
    "default_catalog",
    "export_report",
    "load_catalog",
    "load_config",
    "load_data",
    "record_response",
    "render_report",
    "setup_logging",
    "summarize_by_evaluated",
]
