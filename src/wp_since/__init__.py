"""wp-since: list what changed in a release of a documented code base.

Reads a store of parsed API documentation (classes, methods, functions and
hooks tagged with the versions that touched them) and prints the entries
introduced, modified or deprecated in a given version.
"""

from .indexing import ChangeIndexBuilder, DeprecationTagger
from .importing import DocImporter, ImportEvents
from .models import ChangeQuery, ChangeType, DocEntry, ErrorKind, PostType, Result, VersionTerm
from .reporting import ReportGenerator
from .storage import DocStore
from .versions import VersionResolver

__version__ = "0.1.0"

__all__ = [
    "ChangeIndexBuilder",
    "ChangeQuery",
    "ChangeType",
    "DeprecationTagger",
    "DocEntry",
    "DocImporter",
    "DocStore",
    "ErrorKind",
    "ImportEvents",
    "PostType",
    "ReportGenerator",
    "Result",
    "VersionResolver",
    "VersionTerm",
]
