"""Policy evaluation: match a pull request title or commit message against patterns.

Everything here is pure. Matching uses ``re.search``, so a pattern only
anchors when it says so itself (``^feat:`` must start the title, ``feat:``
may appear anywhere).
"""

from __future__ import annotations

import enum
import logging
import re
from typing import Iterable, Sequence

from prgate_core.errors import ConfigurationError

logger = logging.getLogger(__name__)

REGEX_PLACEHOLDER = "%regex%"


class Outcome(enum.Enum):
    PASS = "pass"
    FAIL = "fail"

    @property
    def passed(self) -> bool:
        return self is Outcome.PASS


class MatchMode(enum.Enum):
    SINGLE = "single"
    ANY = "any"


def compile_patterns(sources: Iterable[str]) -> tuple[re.Pattern, ...]:
    """Compile pattern sources in order. Raises ConfigurationError on the first bad one."""
    compiled = []
    for source in sources:
        if not isinstance(source, str):
            raise ConfigurationError(f"Pattern must be a string, got {type(source).__name__}: {source!r}")
        try:
            compiled.append(re.compile(source))
        except re.error as e:
            raise ConfigurationError(f"Invalid regular expression {source!r}: {e}") from e
    return tuple(compiled)


def _as_pattern(pattern: str | re.Pattern) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    return compile_patterns([pattern])[0]


def _matches(pattern: str | re.Pattern, text: str | None) -> bool:
    return _as_pattern(pattern).search(text or "") is not None


def evaluate_title(
    title: str | None,
    patterns: Sequence[str | re.Pattern],
    mode: MatchMode = MatchMode.SINGLE,
) -> Outcome:
    """Return PASS if the title satisfies the patterns under ``mode``.

    SINGLE expects exactly one pattern. ANY tries the patterns in order and
    stops at the first match. A missing title is matched as "".
    """
    if not patterns:
        raise ConfigurationError("At least one title pattern is required.")
    if mode is MatchMode.SINGLE and len(patterns) != 1:
        raise ConfigurationError(f"Single-pattern mode takes exactly one pattern, got {len(patterns)}.")

    for pattern in patterns:
        if _matches(pattern, title):
            logger.debug("Title %r matched %r", title, _source(pattern))
            return Outcome.PASS
    logger.debug("Title %r matched none of %d pattern(s)", title, len(patterns))
    return Outcome.FAIL


def evaluate_commit(message: str | None, pattern: str | re.Pattern) -> Outcome:
    """Same match semantics as a single-pattern title check."""
    return Outcome.PASS if _matches(pattern, message) else Outcome.FAIL


def _source(pattern: str | re.Pattern) -> str:
    return pattern.pattern if isinstance(pattern, re.Pattern) else pattern


def render_comment(template: str, patterns: Sequence[str | re.Pattern]) -> str:
    """Substitute the first ``%regex%`` in template with the pattern source(s).

    Several patterns are joined with " | ".
    """
    sources = " | ".join(_source(p) for p in patterns)
    return template.replace(REGEX_PLACEHOLDER, sources, 1)
