"""Rule and RuleMatch: the compiled, matchable form of a route.

Path pattern syntax::

    /users              literal segments
    /users/<id>         one segment, bound to ``id``
    /files/<rest:path>  one or more remaining segments, bound to ``rest``

Patterns are validated when the Rule is built, so a bad route table fails
at startup and never at request time.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from courier.errors import ConfigurationError, DuplicateCaptureNameError

_CAPTURE = re.compile(r"^<([A-Za-z_][A-Za-z0-9_]*)(?::(path))?>$")


class SegmentKind(Enum):
    LITERAL = "literal"
    CAPTURE = "capture"
    REST = "rest"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a path pattern.

    Literal: ``/users``        (kind=LITERAL, value="users")
    Capture: ``/<id>``         (kind=CAPTURE, name="id")
    Rest:    ``/<rest:path>``  (kind=REST, name="rest")
    """

    value: str
    kind: SegmentKind = SegmentKind.LITERAL
    name: str | None = None

    @property
    def is_capture(self) -> bool:
        return self.kind is not SegmentKind.LITERAL


def split_path(path: str, *, optional_trailing_slash: bool = True) -> list[str]:
    """Split an absolute path into raw segments.

    ``"/"`` has no segments. With *optional_trailing_slash*, a single
    trailing slash is dropped, so ``/a/`` and ``/a`` split the same.
    """
    if optional_trailing_slash and len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    if path in ("", "/"):
        return []
    return path[1:].split("/")


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a path pattern into segments.

    Examples::

        "/users"            -> (PathSegment("users"),)
        "/users/<id>"       -> (PathSegment("users"), PathSegment("<id>", CAPTURE, "id"))
        "/files/<p:path>"   -> (PathSegment("files"), PathSegment("<p:path>", REST, "p"))

    Raises ``ConfigurationError`` for patterns that are not absolute, for
    malformed ``<...>`` segments, and for a rest capture that is not last.
    """
    if not path.startswith("/"):
        msg = f"Path pattern must start with '/': {path!r}"
        raise ConfigurationError(msg)

    parts = split_path(path)
    segments: list[PathSegment] = []
    for index, part in enumerate(parts):
        if "<" not in part and ">" not in part:
            segments.append(PathSegment(value=part))
            continue

        match = _CAPTURE.match(part)
        if match is None:
            msg = (
                f"Invalid capture segment {part!r} in {path!r}. "
                "Use <name> for one segment or <name:path> for the rest of the path."
            )
            raise ConfigurationError(msg)

        name, rest = match.groups()
        if rest:
            if index != len(parts) - 1:
                msg = f"Rest-of-path capture {part!r} must be the last segment of {path!r}"
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, kind=SegmentKind.REST, name=name))
        else:
            segments.append(PathSegment(value=part, kind=SegmentKind.CAPTURE, name=name))
    return tuple(segments)


def _implied_methods(methods: Sequence[str]) -> frozenset[str]:
    if "GET" in methods and "HEAD" not in methods:
        return frozenset({"HEAD"})
    return frozenset()


@dataclass(frozen=True, slots=True)
class Rule[T]:
    """A path pattern, the methods it answers, and the target it routes to.

    Build with ``Rule.from_uri``; registering ``GET`` also registers ``HEAD``.
    An implied ``HEAD`` yields to an explicit ``HEAD`` rule for the same
    path, whichever was registered first.
    """

    path: str
    methods: tuple[str, ...]
    target: T
    segments: tuple[PathSegment, ...] = field(repr=False, compare=False)
    # Methods the rule answers without having been asked to
    implicit_methods: frozenset[str] = field(default=frozenset(), repr=False, compare=False)

    @classmethod
    def from_uri(cls, uri: str, methods: str | Sequence[str], target: T) -> Rule[T]:
        """Create a rule, validating the pattern.

        Raises ``DuplicateCaptureNameError`` if a capture name repeats.
        """
        if isinstance(methods, str):
            methods = [methods]
        segments = parse_path(uri)
        names = [s.name for s in segments if s.name is not None]
        duplicates = tuple(sorted(name for name, count in Counter(names).items() if count > 1))
        if duplicates:
            raise DuplicateCaptureNameError(uri, duplicates)
        implied = _implied_methods(methods)
        return cls(
            path=uri,
            methods=(*methods, *sorted(implied)),
            target=target,
            segments=segments,
            implicit_methods=implied,
        )

    @property
    def capture_names(self) -> tuple[str, ...]:
        """Capture names in declaration order."""
        return tuple(s.name for s in self.segments if s.name is not None)

    @property
    def capture_count(self) -> int:
        return len(self.capture_names)


@dataclass(frozen=True, slots=True)
class RuleMatch[T]:
    """Result of a successful match.

    ``path_arguments`` keeps declaration order, so values are reachable
    by name and by position.
    """

    rule: Rule[T]
    path_arguments: Mapping[str, str]

    @property
    def target(self) -> T:
        return self.rule.target

    def extract(self, index: int) -> str:
        """Return the value of the *index*-th capture."""
        return list(self.path_arguments.values())[index]

    def parsed_path_arguments(self) -> dict[str, str]:
        return dict(self.path_arguments)
