"""
Remote document processing tools.
"""
from .catalog import ToolSpec, PROCESSING_TOOLS, get_tool
from .client import ProcessingClient, ProcessingResult, SplitFile
from .session import ToolSession

__all__ = [
    'ToolSpec',
    'PROCESSING_TOOLS',
    'get_tool',
    'ProcessingClient',
    'ProcessingResult',
    'SplitFile',
    'ToolSession',
]
