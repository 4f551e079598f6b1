"""Include/exclude glob matching for tracked-file paths."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Optional

from gitdrivesync.errors import ConfigurationError

PATTERN_SEPARATOR: str = "|"
MATCH_ALL: str = "**"


class PathMatcher:
    """
    Decide whether a path relative to the sync subdirectory takes part in sync.

    Patterns come as one string separated by '|'. They are evaluated as a
    whole, in order: a plain pattern adds the path to the match set, a
    '!pattern' removes it again. With no patterns every path matches.

    Glob rules (per '/'-separated segment):
        - '*' and '?' never cross '/'; '**' spans zero or more segments.
        - Wildcards do not match a leading '.' unless the pattern segment
          starts with '.'.
        - Patterns are anchored at the subdirectory root ('*.txt' only
          matches top-level files; use '**/*.txt' for any depth).

    A list starting with a negation has no positive base. With
    implicit_base=True (default) '**' is prepended; otherwise the list is
    rejected so the caller must spell out the base pattern.
    """

    def __init__(self, patterns: Optional[str], *, implicit_base: bool = True) -> None:
        self.patterns: list[str] = []
        if not patterns:
            return

        self.patterns = [p.strip() for p in patterns.split(PATTERN_SEPARATOR) if p.strip()]
        if self.patterns and self.patterns[0].startswith("!"):
            if not implicit_base:
                raise ConfigurationError(
                    "Glob pattern list starts with a negation but has no base pattern",
                    details={"patterns": list(self.patterns)},
                )
            self.patterns.insert(0, MATCH_ALL)

    def matches(self, path: str) -> bool:
        if not self.patterns:
            return True

        segments = _split(_absolute(path))
        matched = False
        for pattern in self.patterns:
            negated = pattern.startswith("!")
            body = pattern[1:] if negated else pattern
            if _match_segments(_split(body), segments):
                matched = not negated
        return matched

    def __repr__(self) -> str:
        return f"PathMatcher({PATTERN_SEPARATOR.join(self.patterns)!r})"


def _absolute(path: str) -> str:
    return path if path.startswith("/") else "/" + path


def _split(path: str) -> list[str]:
    return [seg for seg in path.strip("/").split("/") if seg]


def _glob_match(pattern: str, name: str) -> bool:
    if not pattern.startswith(".") and name.startswith("."):
        return False
    return fnmatchcase(name, pattern)


def _match_segments(pattern: list[str], path: list[str]) -> bool:
    if not pattern:
        return not path

    head, rest = pattern[0], pattern[1:]
    if head == MATCH_ALL:
        for skip in range(len(path) + 1):
            if skip > 0 and path[skip - 1].startswith("."):
                return False
            if _match_segments(rest, path[skip:]):
                return True
        return False

    if not path:
        return False
    return _glob_match(head, path[0]) and _match_segments(rest, path[1:])
