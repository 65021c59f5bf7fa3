"""Request and response headers.

Header names compare case-insensitively. The pairs keep the casing and the
order they were given in, since that is what the transport writes out.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


def _index(pairs: tuple[tuple[str, str], ...]) -> dict[str, tuple[str, ...]]:
    index: dict[str, list[str]] = {}
    for name, value in pairs:
        index.setdefault(name.lower(), []).append(value)
    return {key: tuple(values) for key, values in index.items()}


class Headers(Mapping[str, str]):
    """Read-only header collection shared by ``Request`` and ``Response``.

    Keys are lowercased names. Looking a name up returns its first value;
    ``get_list`` returns every value, in order.
    """

    __slots__ = ("_by_name", "_pairs")

    def __init__(self, pairs: Iterable[tuple[str, str]] | Mapping[str, str] = ()) -> None:
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        self._pairs: tuple[tuple[str, str], ...] = tuple((str(k), str(v)) for k, v in items)
        self._by_name = _index(self._pairs)

    def __getitem__(self, name: str) -> str:
        return self._by_name[name.lower()][0]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_name

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"Headers({list(self._pairs)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._pairs == other._pairs
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(self._pairs)

    def get_list(self, name: str) -> list[str]:
        return list(self._by_name.get(name.lower(), ()))

    def replacing(self, name: str, value: str) -> Headers:
        """Return headers in which *name* has *value* as its only value."""
        key = name.lower()
        return Headers((*(p for p in self._pairs if p[0].lower() != key), (name, value)))

    def updating(self, headers: Mapping[str, str]) -> Headers:
        """Return headers with every entry of *headers* replacing its namesake."""
        result = self
        for name, value in headers.items():
            result = result.replacing(name, value)
        return result

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """The pairs in their original casing and order."""
        return self._pairs
