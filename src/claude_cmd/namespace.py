"""
Hierarchical namespace parsing and validation.

Commands can be grouped under colon-separated ("project:frontend:component")
or path-based ("project/frontend/component") namespaces. Both forms parse to
the same segments; the colon form is canonical.
"""

import re
from dataclasses import dataclass

from .errors import CommandError, validation

COLON = ":"
SLASH = "/"

# Alphanumeric, optional internal hyphens, no leading/trailing hyphen
DEFAULT_SEGMENT_PATTERN = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?\Z")


@dataclass(frozen=True)
class ParsedNamespace:
    """A namespace broken into its segments.

    Attributes:
        original: Trimmed input string
        segments: Non-empty segments in order
        path: Segments joined with "/"
        depth: Number of segments
    """
    original: str
    segments: tuple[str, ...]
    path: str
    depth: int

    @property
    def colon_separated(self) -> str:
        return COLON.join(self.segments)


@dataclass(frozen=True)
class NamespaceValidationOptions:
    max_depth: int = 5
    min_depth: int = 1
    segment_pattern: re.Pattern = DEFAULT_SEGMENT_PATTERN
    allow_empty_segments: bool = False


DEFAULT_OPTIONS = NamespaceValidationOptions()


def _syntax_error(namespace: str, reason: str) -> CommandError:
    return validation(
        f'Invalid namespace syntax "{namespace}": {reason}',
        namespace=namespace,
        reason=reason,
    )


def _split(namespace: str, trimmed: str) -> list[str]:
    """Raw segments of a trimmed namespace, blanks included."""
    if COLON in trimmed and SLASH in trimmed:
        raise _syntax_error(namespace, "Mixed ':' and '/' separators are not allowed")
    if COLON in trimmed:
        return trimmed.split(COLON)
    if SLASH in trimmed:
        return trimmed.split(SLASH)
    return [trimmed]


def parse(namespace: str) -> ParsedNamespace:
    """Parse a namespace string into its segments.

    Raises:
        CommandError: VALIDATION for empty input, mixed separators, or
            input with no non-blank segments
    """
    if not namespace or not namespace.strip():
        raise _syntax_error(namespace, "Namespace cannot be empty")

    trimmed = namespace.strip()

    segments = [s for s in _split(namespace, trimmed) if s.strip()]
    if not segments:
        raise _syntax_error(namespace, "No valid segments found")

    return ParsedNamespace(
        original=trimmed,
        segments=tuple(segments),
        path=SLASH.join(segments),
        depth=len(segments),
    )


def validate_strict(
    namespace: str,
    options: NamespaceValidationOptions | None = None,
) -> ParsedNamespace:
    """Validate a namespace, raising a detailed error on the first violation.

    Returns:
        The parsed namespace when valid

    Raises:
        CommandError: VALIDATION with ``constraint``/``value`` details for
            depth violations, or ``segment`` for pattern violations
    """
    opts = options or DEFAULT_OPTIONS
    parsed = parse(namespace)

    if parsed.depth < opts.min_depth:
        raise validation(
            f'Namespace "{namespace}" violates constraint "min_depth": {parsed.depth}',
            namespace=namespace,
            constraint="min_depth",
            value=parsed.depth,
        )
    if parsed.depth > opts.max_depth:
        raise validation(
            f'Namespace "{namespace}" violates constraint "max_depth": {parsed.depth}',
            namespace=namespace,
            constraint="max_depth",
            value=parsed.depth,
        )

    # parse() drops blank segments; reject them here unless allowed
    if not opts.allow_empty_segments:
        raw = _split(namespace, parsed.original)
        if len(raw) != parsed.depth:
            raise _syntax_error(namespace, "Empty segments are not allowed")

    for segment in parsed.segments:
        if not opts.segment_pattern.fullmatch(segment):
            error = _syntax_error(
                namespace,
                f'Invalid segment "{segment}": must match pattern {opts.segment_pattern.pattern}',
            )
            error.details["segment"] = segment
            raise error

    return parsed


def validate(namespace: str, options: NamespaceValidationOptions | None = None) -> bool:
    """Return True if ``namespace`` passes strict validation."""
    try:
        validate_strict(namespace, options)
    except CommandError:
        return False
    return True


def to_path(namespace: str) -> str:
    """Convert to path form: "a:b:c" -> "a/b/c"."""
    return parse(namespace).path


def to_colon_separated(namespace: str) -> str:
    """Convert to canonical colon form: "a/b/c" -> "a:b:c"."""
    return parse(namespace).colon_separated


def get_parent(namespace: str) -> str | None:
    """Drop the last segment; None for a top-level namespace."""
    parsed = parse(namespace)
    if parsed.depth <= 1:
        return None
    return COLON.join(parsed.segments[:-1])


def is_parent_of(parent: str, child: str) -> bool:
    """True iff ``parent`` is a strict prefix of ``child``."""
    p = parse(parent)
    c = parse(child)
    if p.depth >= c.depth:
        return False
    return c.segments[: p.depth] == p.segments


def get_ancestors(namespace: str) -> list[str]:
    """Every strict prefix from shallowest to deepest: "a:b:c" -> ["a", "a:b"]."""
    segments = parse(namespace).segments
    return [COLON.join(segments[:i]) for i in range(1, len(segments))]
