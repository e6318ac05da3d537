"""Case-insensitive, read-only request headers.

Built once from the ASGI ``(name, value)`` byte pairs. Names are folded
to lowercase and every value is kept, in arrival order.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only request headers.

    Indexing gives the first value of a header; ``get_list`` gives all of
    them and ``get_line`` joins them the way a proxy would fold them.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._raw = raw
        self._values = {name: tuple(v) for name, v in values.items()}

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> Headers:
        """Headers from a plain ``{name: value}`` mapping."""
        return cls(tuple((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()))

    def __getitem__(self, key: str) -> str:
        values = self._values.get(key.lower())
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._values.get(key.lower())
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key.lower(), ()))

    def get_line(self, key: str) -> str:
        """Every value of *key* joined with ``", "``; ``""`` when absent."""
        return ", ".join(self._values.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw
