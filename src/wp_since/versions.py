"""Version parsing, ordering and resolution for wp-since."""

import re
from typing import Any, Dict, Optional, Tuple
import logging

from .models import ErrorKind, Result

logger = logging.getLogger(__name__)

CURRENT_VERSION_OPTION = "imported_version"

_VERSION_PATTERN = re.compile(
    r'^(?P<release>\d+(?:\.\d+)*)(?:[-.]?(?P<prerelease>(?:alpha|beta|rc|RC)[.-]?\d*))?$'
)


def parse_version(version_string: str) -> Dict[str, Any]:
    """Parse a release version string.

    Handles the two and three component numbering used by WordPress releases
    ("4.2", "4.7.1") and simple pre-release suffixes ("5.0-beta1").

    Args:
        version_string: Version string to parse

    Returns:
        Parsed version components
    """
    match = _VERSION_PATTERN.match(version_string.strip())
    if not match:
        # Fallback for free-form versions ("MU (3.0.0)"): keep the first numeric run
        numbers = re.search(r'\d+(?:\.\d+)*', version_string)
        release = tuple(int(part) for part in numbers.group(0).split('.')) if numbers else ()
        return {
            "version_string": version_string,
            "release": release,
            "pre_release": None,
            "is_valid": False
        }

    return {
        "version_string": version_string,
        "release": tuple(int(part) for part in match.group("release").split('.')),
        "pre_release": match.group("prerelease"),
        "is_valid": True
    }


def version_key(version_string: str) -> Tuple:
    """Sort key that orders versions numerically, pre-releases before their release."""
    parsed = parse_version(version_string)
    release = parsed["release"]
    # "4.2" and "4.2.0" compare equal
    while release and release[-1] == 0:
        release = release[:-1]
    pre = parsed["pre_release"]
    return (release, 0 if pre else 1, (pre or "").lower(), version_string)


def compare_versions(version1: str, version2: str) -> int:
    """Compare two versions.

    Returns:
        -1 if version1 < version2, 0 if equal, 1 if version1 > version2
    """
    k1 = version_key(version1)[:3]
    k2 = version_key(version2)[:3]
    if k1 < k2:
        return -1
    elif k1 > k2:
        return 1
    return 0


def earliest_version(versions) -> Optional[str]:
    versions = list(versions)
    if not versions:
        return None
    return min(versions, key=version_key)


class VersionResolver:
    """Resolves the version a report should cover."""

    def __init__(self, store):
        """Initialize the resolver.

        Args:
            store: DocStore used for the "current version" lookup
        """
        self.store = store

    def get_current_version_term(self) -> Result:
        """Look up the term for the most recently imported version."""
        current_version = self.store.get_option(CURRENT_VERSION_OPTION)
        if not current_version:
            return Result.failure(ErrorKind.INPUT, "No imported version has been recorded")

        term = self.store.get_term("since", current_version)
        if term is None:
            return Result.failure(
                ErrorKind.INPUT,
                f"The imported version {current_version} has no matching since term"
            )

        return Result.success(term)

    def resolve(self, explicit_version: Optional[str] = None) -> Result:
        """Resolve the version to report on.

        A non-empty explicit version is returned as given; it is validated
        later by the report generator.

        Args:
            explicit_version: Version passed on the command line

        Returns:
            Result holding the version string, or an input error with all messages
        """
        if explicit_version:
            return Result.success(explicit_version)

        current = self.get_current_version_term()
        if not current.ok:
            return Result.failure(ErrorKind.INPUT, "Couldn't get current version", *current.messages)

        logger.debug(f"Resolved current version {current.value.name}")
        return Result.success(current.value.name)
