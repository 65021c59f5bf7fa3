"""Compiled router with trie-based path matching.

Rules are compiled once, at startup, into an immutable arena of trie
nodes addressed by integer id. Each node has literal children keyed by
segment text, at most one capture child (``<name>``) and at most one
rest child (``<name:path>``), plus a per-method table of rules for paths
ending at that node.

Matching precedence at every depth is literal, then capture, then rest.
When a more specific branch dead-ends (no rule, or no rule for the
method) the matcher backtracks to the next branch, so the most specific
rule that accepts the method wins.

A compiled Router is read-only: ``match`` and ``allowed_methods`` may be
called concurrently without locking.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import unquote

from courier.errors import InvalidUriError
from courier.routing.rule import Rule, RuleMatch, SegmentKind, split_path

# Whitespace, control characters, and '%' not followed by two hex digits
_INVALID_PATH = re.compile(r"[\x00-\x20\x7f]|%(?![0-9A-Fa-f]{2})")


@dataclass(slots=True)
class _Node[T]:
    """A node in the rule trie. Mutable during compilation only."""

    # Literal segment children: "users" -> node id
    literals: dict[str, int] = field(default_factory=dict)
    # Single-segment capture child
    capture: int | None = None
    # Rest-of-path capture child; its rules consume everything left
    rest: int | None = None
    # Rules for paths ending here, keyed by HTTP method
    rules: dict[str, Rule[T]] = field(default_factory=dict)


def validate_path(path: str) -> None:
    """Raise ``InvalidUriError`` unless *path* is a routable absolute path."""
    if not path.startswith("/"):
        msg = f"Path must be absolute: {path!r}"
        raise InvalidUriError(msg)
    if _INVALID_PATH.search(path):
        msg = f"Malformed path: {path!r}"
        raise InvalidUriError(msg)


def _decode_segment(raw: str) -> str:
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError as exc:
        msg = f"Unable to decode path segment {raw!r}"
        raise InvalidUriError(msg) from exc


class Router[T]:
    """Immutable trie matcher over a set of rules.

    Usage::

        router = Router.compile([
            Rule.from_uri("/users", "GET", list_users),
            Rule.from_uri("/users/<id>", ["GET", "PUT"], user),
        ])
        match = router.match("GET", "/users/42")
        match.path_arguments  # {"id": "42"}
    """

    __slots__ = ("_nodes", "_optional_trailing_slash", "_rules")

    def __init__(
        self,
        nodes: tuple[_Node[T], ...],
        rules: tuple[Rule[T], ...],
        optional_trailing_slash: bool,
    ) -> None:
        self._nodes = nodes
        self._rules = rules
        self._optional_trailing_slash = optional_trailing_slash

    @classmethod
    def compile(
        cls, rules: Iterable[Rule[T]], *, optional_trailing_slash: bool = True
    ) -> Router[T]:
        """Build the trie.

        The first rule registered for a method and path wins, except that an
        explicit method always replaces one a rule only implied.
        """
        nodes: list[_Node[T]] = [_Node()]
        rule_list = tuple(rules)

        def child(parent: int, kind: SegmentKind, value: str) -> int:
            node = nodes[parent]
            if kind is SegmentKind.LITERAL:
                existing = node.literals.get(value)
            elif kind is SegmentKind.CAPTURE:
                existing = node.capture
            else:
                existing = node.rest
            if existing is not None:
                return existing

            nodes.append(_Node())
            new_id = len(nodes) - 1
            if kind is SegmentKind.LITERAL:
                node.literals[value] = new_id
            elif kind is SegmentKind.CAPTURE:
                node.capture = new_id
            else:
                node.rest = new_id
            return new_id

        for rule in rule_list:
            node_id = 0
            for segment in rule.segments:
                node_id = child(node_id, segment.kind, segment.value)
            table = nodes[node_id].rules
            for method in rule.methods:
                current = table.get(method)
                if current is None or (
                    method in current.implicit_methods and method not in rule.implicit_methods
                ):
                    table[method] = rule

        return cls(tuple(nodes), rule_list, optional_trailing_slash)

    @property
    def rules(self) -> tuple[Rule[T], ...]:
        """All compiled rules, in registration order."""
        return self._rules

    def targets(self) -> list[T]:
        return [rule.target for rule in self._rules]

    def match(self, method: str, path: str) -> RuleMatch[T] | None:
        """Match a method and raw path against the compiled rules.

        Returns ``None`` when nothing matches (including a path that
        matches only for other methods; see ``allowed_methods``).
        Raises ``InvalidUriError`` if *path* is malformed.
        """
        validate_path(path)
        parts = split_path(path, optional_trailing_slash=self._optional_trailing_slash)
        found = self._search(0, parts, 0, method, [])
        if found is None:
            return None

        rule, values = found
        arguments = {
            name: value if kind is SegmentKind.REST else _decode_segment(value)
            for name, (kind, value) in zip(rule.capture_names, values, strict=True)
        }
        return RuleMatch(rule=rule, path_arguments=arguments)

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Every method some rule accepts for *path*.

        Empty when no rule matches the path at all, or the path is malformed.
        """
        try:
            validate_path(path)
        except InvalidUriError:
            return frozenset()
        parts = split_path(path, optional_trailing_slash=self._optional_trailing_slash)
        methods: set[str] = set()
        self._collect(0, parts, 0, methods)
        return frozenset(methods)

    # -- Internal --

    def _search(
        self,
        node_id: int,
        parts: list[str],
        index: int,
        method: str,
        values: list[tuple[SegmentKind, str]],
    ) -> tuple[Rule[T], list[tuple[SegmentKind, str]]] | None:
        """Depth-first search in precedence order, backtracking on dead ends."""
        node = self._nodes[node_id]

        # All parts consumed: this node decides
        if index == len(parts):
            rule = node.rules.get(method)
            return (rule, values) if rule is not None else None

        part = parts[index]

        # 1. Literal child (exact match)
        literal = node.literals.get(part)
        if literal is not None:
            found = self._search(literal, parts, index + 1, method, values)
            if found is not None:
                return found

        # 2. Capture child, never binds an empty segment
        if node.capture is not None and part:
            found = self._search(
                node.capture,
                parts,
                index + 1,
                method,
                [*values, (SegmentKind.CAPTURE, part)],
            )
            if found is not None:
                return found

        # 3. Rest-of-path child consumes everything left
        if node.rest is not None:
            remaining = "/".join(parts[index:])
            rule = self._nodes[node.rest].rules.get(method)
            if remaining and rule is not None:
                return rule, [*values, (SegmentKind.REST, remaining)]

        return None

    def _collect(self, node_id: int, parts: list[str], index: int, methods: set[str]) -> None:
        """Gather methods from every node the path can reach."""
        node = self._nodes[node_id]
        if index == len(parts):
            methods.update(node.rules)
            return

        part = parts[index]
        literal = node.literals.get(part)
        if literal is not None:
            self._collect(literal, parts, index + 1, methods)
        if node.capture is not None and part:
            self._collect(node.capture, parts, index + 1, methods)
        if node.rest is not None and "/".join(parts[index:]):
            methods.update(self._nodes[node.rest].rules)
