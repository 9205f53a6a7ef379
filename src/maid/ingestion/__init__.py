"""Discovery and content sampling for candidate files.

The pipeline lives in :mod:`maid.ingestion.pipeline`; it depends on the organization
package and is imported from there to keep this package import-light.
"""

from .discovery import DirectoryScanner, ensure_root
from .extractors import ContentSampler
from .models import FileRecord, IngestionResult

__all__ = [
    "ContentSampler",
    "DirectoryScanner",
    "FileRecord",
    "IngestionResult",
    "ensure_root",
]
