"""
The document tools offered by the processing service.
"""
from dataclasses import dataclass
from typing import Dict, List

IMAGE_TYPES = '.jpg,.jpeg,.png,.gif,.bmp,.webp'
PDF_TYPES = '.pdf'


@dataclass(frozen=True)
class ToolSpec:
    """Describes one processing tool and the files it takes."""
    endpoint: str
    title: str
    description: str
    accept: str
    multiple: bool
    action_label: str

    @property
    def upload_field(self) -> str:
        # Multipart field name expected by the service
        return 'files' if self.multiple else 'file'


PROCESSING_TOOLS: List[ToolSpec] = [
    ToolSpec(
        endpoint='image-to-pdf',
        title='Image to PDF',
        description='Convert images into a single PDF document.',
        accept=IMAGE_TYPES,
        multiple=True,
        action_label='Convert to PDF',
    ),
    ToolSpec(
        endpoint='compress-pdf',
        title='Compress PDF',
        description='Reduce the file size of a PDF document.',
        accept=PDF_TYPES,
        multiple=False,
        action_label='Compress PDF',
    ),
    ToolSpec(
        endpoint='split-pdf',
        title='Split PDF',
        description='Split a PDF into separate documents.',
        accept=PDF_TYPES,
        multiple=False,
        action_label='Split PDF',
    ),
    ToolSpec(
        endpoint='merge-pdf',
        title='Merge PDF',
        description='Combine several PDF documents into one.',
        accept=PDF_TYPES,
        multiple=True,
        action_label='Merge PDFs',
    ),
]

_BY_ENDPOINT: Dict[str, ToolSpec] = {tool.endpoint: tool for tool in PROCESSING_TOOLS}


def get_tool(endpoint: str) -> ToolSpec:
    """
    Look up a tool by endpoint name.

    Raises:
        KeyError: if no such tool exists
    """
    return _BY_ENDPOINT[endpoint]
