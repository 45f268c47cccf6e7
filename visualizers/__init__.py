"""Rendering of workout lists."""

from .report_generator import ReportGenerator

__all__ = ['ReportGenerator']
