"""Package catalog parsed from ``sdkmanager --list``.

The listing is a sequence of header-delimited tables::

    Installed packages:
      Path                 | Version | Description                    | Location
      -------              | ------- | -------                        | -------
      build-tools;29.0.2   | 29.0.2  | Android SDK Build-Tools 29.0.2 | build-tools/29.0.2/

    Available Packages:
      Path                 | Version | Description
      -------              | ------- | -------
      emulator             | 30.0.26 | Android Emulator

    Available Updates:
      ID                   | Installed | Available
      -------              | -------   | -------
      emulator             | 30.0.12   | 30.0.26

Parsing is tolerant: rows that cannot be read are skipped and unrecognized
text yields an empty catalog.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from android_emulator.sdk.version import Version

logger = logging.getLogger(__name__)

SECTION_INSTALLED = "installed"
SECTION_AVAILABLE = "available"
SECTION_UPDATES = "updates"

_SECTION_HEADERS: Tuple[Tuple[str, str], ...] = (
    ("installed packages", SECTION_INSTALLED),
    ("available packages", SECTION_AVAILABLE),
    ("available updates", SECTION_UPDATES),
)

_COLUMN_HEADERS = {"path", "id"}
_SEPARATOR_CELL = re.compile(r"-+")


@dataclass(frozen=True, order=True)
class SDKPackage:
    """A single SDK component.

    Ordered by id, then version ascending; the greatest element among packages
    sharing an id is the most recent one.
    """

    id: str
    version: Version
    name: str = field(default="", compare=False)
    location: Optional[str] = field(default=None, compare=False)
    installed_version: Optional[Version] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", self.id)


@dataclass(frozen=True)
class SDKPackages:
    installed: Tuple[SDKPackage, ...] = ()
    available: Tuple[SDKPackage, ...] = ()
    updates: Tuple[SDKPackage, ...] = ()

    def is_empty(self) -> bool:
        return not (self.installed or self.available or self.updates)

    def installed_ids(self) -> List[str]:
        return [p.id for p in self.installed]

    def update_ids(self) -> List[str]:
        return [p.id for p in self.updates]

    def find_available(self, prefix: str, *, include_previews: bool = True) -> List[SDKPackage]:
        return [
            p
            for p in self.available
            if p.id.startswith(prefix) and (include_previews or not p.version.is_preview)
        ]

    def latest(self, prefix: str, *, include_previews: bool = True) -> Optional[SDKPackage]:
        """Most recent available package whose id starts with `prefix`.

        Versions are compared before ids, so among several build-tools
        (``build-tools;9.0.0``, ``build-tools;30.0.0``) 30.0.0 wins although
        ``build-tools;9.0.0`` sorts after it by id.
        """

        candidates = self.find_available(prefix, include_previews=include_previews)
        if not candidates:
            return None
        return max(candidates, key=lambda p: (p.version, p.id))

    def as_dict(self) -> Dict[str, List[Dict[str, Optional[str]]]]:
        def _pkg(p: SDKPackage) -> Dict[str, Optional[str]]:
            out: Dict[str, Optional[str]] = {"id": p.id, "name": p.name, "version": str(p.version)}
            if p.location is not None:
                out["location"] = p.location
            if p.installed_version is not None:
                out["installed_version"] = str(p.installed_version)
            return out

        return {
            SECTION_INSTALLED: [_pkg(p) for p in self.installed],
            SECTION_AVAILABLE: [_pkg(p) for p in self.available],
            SECTION_UPDATES: [_pkg(p) for p in self.updates],
        }


def _detect_section(lc_line: str) -> Optional[str]:
    for header, section in _SECTION_HEADERS:
        if lc_line.startswith(header):
            return section
    return None


def _is_header_row(cells: List[str]) -> bool:
    if cells[0].lower() in _COLUMN_HEADERS:
        return True
    return all(_SEPARATOR_CELL.fullmatch(c) for c in cells if c)


def _package_from_cells(section: str, cells: List[str]) -> Optional[SDKPackage]:
    if len(cells) < 2 or not cells[0] or not cells[1]:
        return None

    if section == SECTION_UPDATES:
        if len(cells) < 3 or not cells[2]:
            return None
        return SDKPackage(
            id=cells[0],
            version=Version.parse(cells[2]),
            installed_version=Version.parse(cells[1]),
        )

    name = cells[2] if len(cells) > 2 else ""
    location = cells[3] if len(cells) > 3 and cells[3] else None
    return SDKPackage(id=cells[0], version=Version.parse(cells[1]), name=name, location=location)


def parse_sdk_packages(text: Optional[str]) -> SDKPackages:
    """Parse the output of ``sdkmanager --list`` into a catalog."""

    buckets: Dict[str, Dict[str, SDKPackage]] = {
        SECTION_INSTALLED: {},
        SECTION_AVAILABLE: {},
        SECTION_UPDATES: {},
    }
    if not text:
        return SDKPackages()

    section: Optional[str] = None
    for raw_line in str(text).splitlines():
        line = raw_line.strip()
        if not line:
            continue

        detected = _detect_section(line.lower())
        if detected is not None:
            section = detected
            continue

        if section is None or "|" not in line:
            continue

        cells = [c.strip() for c in line.split("|")]
        if _is_header_row(cells):
            continue

        pkg = _package_from_cells(section, cells)
        if pkg is None:
            logger.debug("Skipping malformed %s row: %r", section, line)
            continue

        bucket = buckets[section]
        if pkg.id not in bucket:
            bucket[pkg.id] = pkg

    installed = buckets[SECTION_INSTALLED]
    updates: List[SDKPackage] = []
    for pkg in buckets[SECTION_UPDATES].values():
        current = installed.get(pkg.id)
        if current is None:
            logger.debug("Ignoring update for package not installed: %s", pkg.id)
            continue
        updates.append(
            SDKPackage(
                id=pkg.id,
                version=pkg.version,
                name=current.name,
                location=current.location,
                installed_version=pkg.installed_version,
            )
        )

    return SDKPackages(
        installed=tuple(installed.values()),
        available=tuple(buckets[SECTION_AVAILABLE].values()),
        updates=tuple(updates),
    )


def merge_ids(*groups: Iterable[str]) -> List[str]:
    """Concatenate id groups keeping first-seen order and dropping duplicates."""

    seen: Dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return list(seen)
