"""
Maintain the list of crates which CMakeLists.txt links into the launcher.

The list lives between two marker comments:

    # BEGIN CRATES_TO_BUILD
    LinkCxxQtCrate(foo hematite_foo)
    # END CRATES_TO_BUILD

Everything outside of the markers is left alone. Inside of them, we keep one
sorted, duplicate-free `LinkCxxQtCrate(...)` line per crate. Any other line
found between the markers is moved to just after the end marker.
"""

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from xtask.errors import IoFailed, ManifestError

BEGIN_MARKER = "# BEGIN CRATES_TO_BUILD"
END_MARKER = "# END CRATES_TO_BUILD"

_BEGIN_RE = re.compile(r"^# BEGIN CRATES_TO_BUILD")
_END_RE = re.compile(r"^# END CRATES_TO_BUILD")
_STATEMENT_RE = re.compile(r"^LinkCxxQtCrate\((.*)\)$")


def registration(name: str, crate_name: str) -> str:
    """The CMake statement which links crate_name (living in directory name)."""
    return f"LinkCxxQtCrate({name} {crate_name})"


@enum.unique
class _Section(enum.Enum):
    BEFORE = enum.auto()
    MANAGED = enum.auto()
    AFTER = enum.auto()


@dataclass(frozen=True)
class ManifestRegions:
    before: List[str] = field(default_factory=list)
    """Lines up to and including the begin marker"""
    managed: List[str] = field(default_factory=list)
    """Registration statements, followed by the end marker"""
    after: List[str] = field(default_factory=list)
    """Everything after the end marker, plus any stray lines evicted from the managed region"""

    def with_statement(self, statement: str) -> "ManifestRegions":
        """Return a copy with statement registered and the managed region sorted."""
        if not _STATEMENT_RE.match(statement):
            raise ValueError(f"{statement!r} isn't a LinkCxxQtCrate statement")
        managed = list(self.managed)
        if statement not in managed:
            managed.append(statement)
        return ManifestRegions(
            before=list(self.before),
            managed=_sorted_managed(managed),
            after=list(self.after),
        )

    def render(self) -> str:
        return (
            "\n".join(self.before)
            + "\n"
            + "\n".join(self.managed)
            + "\n"
            + "\n".join(self.after)
        )


def _sorted_managed(managed: List[str]) -> List[str]:
    # The end marker stays last so the region remains well formed.
    statements = sorted(line for line in managed if not _END_RE.match(line))
    markers = [line for line in managed if _END_RE.match(line)]
    return statements + markers


def split_manifest(lines: Iterable[str]) -> ManifestRegions:
    """
    Split the lines of CMakeLists.txt into the before/managed/after regions.

    Duplicate statements in the managed region are dropped. Raises ManifestError if
    either marker is missing.
    """
    regions = ManifestRegions()
    section = _Section.BEFORE
    for line in lines:
        if section == _Section.BEFORE:
            if _BEGIN_RE.match(line):
                section = _Section.MANAGED
            regions.before.append(line)
        elif section == _Section.MANAGED:
            if _END_RE.match(line):
                section = _Section.AFTER
                regions.managed.append(line)
            elif _STATEMENT_RE.match(line):
                if line not in regions.managed:
                    regions.managed.append(line)
            else:
                regions.after.append(line)
        else:
            regions.after.append(line)
    if section == _Section.BEFORE:
        raise ManifestError(f"couldn't find `{BEGIN_MARKER}`")
    if section == _Section.MANAGED:
        raise ManifestError(f"couldn't find `{END_MARKER}` after `{BEGIN_MARKER}`")
    return regions


def patch_manifest(path: Path, statement: str) -> None:
    """
    Register statement in the managed region of the CMake file at path.

    Registering a statement which is already present is a no-op (apart from
    re-sorting the region).
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IoFailed(f"read {path}", e) from e
    try:
        regions = split_manifest(text.split("\n"))
    except ManifestError as e:
        raise ManifestError(f"{path}: {e.message}") from None
    patched = regions.with_statement(statement).render()
    try:
        path.write_text(patched, encoding="utf-8")
    except OSError as e:
        raise IoFailed(f"write {path}", e) from e
