"""Output generators for week overviews."""

from schoolstaffing.output.pdf_generator import PDFReportGenerator
from schoolstaffing.output.text_generator import TextReportGenerator

__all__ = [
    "PDFReportGenerator",
    "TextReportGenerator",
]
