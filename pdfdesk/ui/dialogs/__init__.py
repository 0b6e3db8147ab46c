"""
Dialogs for the document processing tools.
"""
from .tool_dialog import ProcessingWorker, ToolDialog

__all__ = ['ProcessingWorker', 'ToolDialog']
