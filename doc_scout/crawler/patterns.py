# doc_scout/crawler/patterns.py
"""
Include/exclude URL filtering with glob and regex patterns.

A pattern wrapped in slashes (``/docs/v\\d+/``) is a regular expression searched
anywhere in the URL path. Everything else is a glob anchored to the whole
path: ``*`` matches any run of characters except ``/``, ``**`` crosses
directories, ``?`` matches one non-slash character, ``[...]`` a character class and
``{a,b}`` an alternation. Patterns are compiled once, when the filter is
built; malformed ones raise :class:`InvalidPatternError` right there.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union
from urllib.parse import unquote, urlsplit

from doc_scout.errors import InvalidPatternError

__all__: Sequence[str] = (
    "RegexPattern",
    "GlobPattern",
    "Pattern",
    "compile_pattern",
    "is_regex_pattern",
    "extract_path_and_query",
    "PatternFilter",
    "should_include",
)


@dataclass(slots=True, frozen=True)
class RegexPattern:
    source: str
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        return self.regex.search(path) is not None


@dataclass(slots=True, frozen=True)
class GlobPattern:
    source: str
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        # globs are anchored to the path with its leading slash ignored
        return self.regex.fullmatch(path.lstrip("/")) is not None


Pattern = Union[RegexPattern, GlobPattern]


def is_regex_pattern(pattern: str) -> bool:
    return len(pattern) > 2 and pattern.startswith("/") and pattern.endswith("/")


def _translate_glob(glob: str) -> str:
    out: List[str] = []
    i, n = 0, len(glob)
    brace_depth = 0
    while i < n:
        ch = glob[i]
        if ch == "*":
            stars = 1
            while i + 1 < n and glob[i + 1] == "*":
                i += 1
                stars += 1
            if stars == 1:
                out.append("[^/]*")
            elif i + 1 < n and glob[i + 1] == "/":
                # "**/" also matches zero directories
                i += 1
                out.append("(?:.*/)?")
            else:
                out.append(".*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            end = glob.find("]", i + 2 if i + 1 < n and glob[i + 1] in "!^" else i + 1)
            if end == -1:
                raise InvalidPatternError(glob, "unterminated character class")
            body = glob[i + 1:end]
            negate = body[:1] in ("!", "^")
            if negate:
                body = body[1:]
            body = body.replace("\\", "\\\\")
            out.append(f"[^/{body}]" if negate else f"[{body}]")
            i = end
        elif ch == "{":
            brace_depth += 1
            out.append("(?:")
        elif ch == "}" and brace_depth:
            brace_depth -= 1
            out.append(")")
        elif ch == "," and brace_depth:
            out.append("|")
        elif ch == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(glob[i]))
        else:
            out.append(re.escape(ch))
        i += 1
    if brace_depth:
        raise InvalidPatternError(glob, "unterminated brace group")
    return "".join(out)


def compile_pattern(pattern: str) -> Pattern:
    """Решает один раз, regex это или glob, и компилирует."""
    if is_regex_pattern(pattern):
        try:
            return RegexPattern(pattern, re.compile(pattern[1:-1]))
        except re.error as exc:
            raise InvalidPatternError(pattern, str(exc)) from exc
    if not pattern:
        raise InvalidPatternError(pattern, "empty pattern")
    translated = _translate_glob(pattern.lstrip("/"))
    try:
        return GlobPattern(pattern, re.compile(translated))
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


def extract_path_and_query(url: str) -> str:
    """Path + query of *url* (scheme and host stripped), always starting with ``/``."""
    parts = urlsplit(url)
    path = parts.path + (f"?{parts.query}" if parts.query else "")
    return path if path.startswith("/") else f"/{path}"


def _basename(url: str) -> Optional[str]:
    if not url.startswith("file:"):
        return None
    name = unquote(urlsplit(url).path).rsplit("/", 1)[-1]
    return name or None


class PatternFilter:
    """Compiled include/exclude lists; exclude always wins."""

    def __init__(
        self,
        include_patterns: Optional[Iterable[str]] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
    ) -> None:
        self.include: List[Pattern] = [compile_pattern(p) for p in include_patterns or ()]
        self.exclude: List[Pattern] = [compile_pattern(p) for p in exclude_patterns or ()]

    @staticmethod
    def _any_match(patterns: List[Pattern], path: str, basename: Optional[str]) -> bool:
        for pattern in patterns:
            if pattern.matches(path):
                return True
            # only globs name files; a regex sees the full path
            if basename is not None and isinstance(pattern, GlobPattern) and pattern.matches(basename):
                return True
        return False

    def should_include(self, url: str) -> bool:
        path = extract_path_and_query(url)
        basename = _basename(url)
        if self._any_match(self.exclude, path, basename):
            return False
        if not self.include:
            return True
        return self._any_match(self.include, path, basename)


def should_include(
    url: str,
    include_patterns: Optional[Iterable[str]] = None,
    exclude_patterns: Optional[Iterable[str]] = None,
) -> bool:
    return PatternFilter(include_patterns, exclude_patterns).should_include(url)
