"""Report output for wptrun."""

from .generator import ReportGenerator

__all__ = ["ReportGenerator"]
