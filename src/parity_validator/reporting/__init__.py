"""Reporting modules: console rendering, report files and charts."""

from .console import ConsoleRenderer
from .report_generator import ReportGenerator

__all__ = ['ConsoleRenderer', 'ReportGenerator']
