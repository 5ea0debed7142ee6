"""Archive readers and output writers."""
from .archive import ArchiveReader, MappingArchive
from .sr3 import Sr3Archive

__all__ = ["ArchiveReader", "MappingArchive", "Sr3Archive"]
