"""Import pipeline for wp-since.

Parsed documentation is loaded into the store here; listeners such as the
deprecation tagger subscribe to its events.
"""

from .events import ImportEvents, EVENTS
from .importer import DocImporter

__all__ = [
    "ImportEvents",
    "EVENTS",
    "DocImporter",
]
