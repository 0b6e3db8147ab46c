"""
User interface components for PDFDesk.
"""
from .windows import MainWindow

__all__ = ['MainWindow']
