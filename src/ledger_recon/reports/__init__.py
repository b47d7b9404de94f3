"""Excel reports of matching runs."""

from .excel_generator import ExcelReportGenerator

__all__ = ["ExcelReportGenerator"]
