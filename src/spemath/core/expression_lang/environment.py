"""
Name/value environment for one evaluation run.
"""

from __future__ import annotations

from collections.abc import Iterator

from spemath.core.ir.values import Value


class Environment:
    """
    Mapping from name to value. Keys are exact, case-sensitive strings and
    the last write wins.

    Calls do not capture environments; they take a :meth:`snapshot` of the
    caller's environment at call time and bind parameters into it.
    """

    def __init__(self, bindings: dict[str, Value] | None = None) -> None:
        self._bindings: dict[str, Value] = dict(bindings) if bindings else {}

    def get(self, name: str) -> Value | None:
        return self._bindings.get(name)

    def set(self, name: str, value: Value) -> None:
        self._bindings[name] = value

    def snapshot(self) -> Environment:
        """Independent copy; writes to either side are not seen by the other."""
        return Environment(self._bindings)

    def names(self) -> list[str]:
        return list(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Environment({', '.join(self._bindings)})"
