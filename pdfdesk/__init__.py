"""
PDFDesk: PDF viewer, annotator and processing tools.
"""
__version__ = "0.3.0"
