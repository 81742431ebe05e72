"""Core data types for the wp-since reporting system."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ChangeType(Enum):
    """How an entry relates to a given version."""
    INTRODUCED = "introduced"
    MODIFIED = "modified"
    DEPRECATED = "deprecated"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def expand(cls, change_type: str) -> List["ChangeType"]:
        """Expand a command-line change type, where "any" means all, in fixed order."""
        if change_type == "any":
            return [cls.INTRODUCED, cls.MODIFIED, cls.DEPRECATED]
        return [cls(change_type)]


class PostType(Enum):
    """Kinds of documentation entry."""
    CLASS = "class"
    FUNCTION = "function"
    HOOK = "hook"
    METHOD = "method"

    @property
    def label(self) -> str:
        labels = {
            PostType.CLASS: "Classes",
            PostType.FUNCTION: "Functions",
            PostType.HOOK: "Hooks",
            PostType.METHOD: "Methods",
        }
        return labels[self]

    @classmethod
    def parse(cls, post_type: Optional[str]) -> Optional["PostType"]:
        """Accept "any" (None), plain names, or the parser's "wp-parser-" prefixed names."""
        if not post_type or post_type == "any":
            return None
        if post_type.startswith("wp-parser-"):
            post_type = post_type[len("wp-parser-"):]
        return cls(post_type)


class ErrorKind(Enum):
    """Failure categories the tool distinguishes."""
    CONFIGURATION = "configuration"  # fatal, before any command runs
    INPUT = "input"                  # fatal, no report produced
    DATA_ANOMALY = "data_anomaly"    # logged and skipped
    EMPTY = "empty"                  # not an error

    @property
    def is_fatal(self) -> bool:
        return self in (ErrorKind.CONFIGURATION, ErrorKind.INPUT)


@dataclass
class Result:
    """Outcome of an operation that can fail without raising."""
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_kind is None or not self.error_kind.is_fatal

    @classmethod
    def success(cls, value: Any) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, *messages: str) -> "Result":
        return cls(error_kind=kind, messages=list(messages))


@dataclass
class DocEntry:
    """A documented class, method, function or hook."""
    id: int
    post_type: PostType
    title: str
    tags: List[Dict[str, Any]] = field(default_factory=list)
    packages: List[str] = field(default_factory=list)
    source_file: Optional[str] = None
    ticket: Optional[str] = None

    def tags_named(self, name: str) -> List[Dict[str, Any]]:
        return [tag for tag in self.tags if tag.get("name") == name]

    @property
    def deprecated_version(self) -> Optional[str]:
        deprecated = self.tags_named("deprecated")
        if not deprecated:
            return None
        content = str(deprecated[0].get("content") or "").strip()
        return content or None


@dataclass
class VersionTerm:
    """A release version in the "since" taxonomy."""
    id: int
    name: str


@dataclass(frozen=True)
class ChangeQuery:
    """Recognized options for querying the entries changed in one version.

    Attributes:
        version: Name of the "since" term to report on
        change_type: Bucket of the change index to read
        post_type: Restrict to one post type, or None for any
        order_by: Sort columns; the report's grouping depends on this order
    """
    version: str
    change_type: ChangeType
    post_type: Optional[PostType] = None
    order_by: Tuple[str, ...] = ("post_type", "title")

    def post_types(self) -> List[PostType]:
        if self.post_type is None:
            return list(PostType)
        return [self.post_type]
