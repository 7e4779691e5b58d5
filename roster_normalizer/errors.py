"""Data errors raised while normalizing a roster.

Every error here describes malformed or unanticipated roster content. The
assemblers never recover from them locally; each level only records where in
the tree the failure happened before letting it propagate.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class RosterDataError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: list[str] = []

    def add_context(self, name: str | None) -> "RosterDataError":
        if name and self.path[:1] != [name]:
            self.path.insert(0, name)
        return self

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.message} (in {' > '.join(self.path)})"


class MalformedStatValue(RosterDataError):
    def __init__(self, token: str | None, field: str | None = None) -> None:
        self.token = token
        self.field = field
        label = f" for {field}" if field else ""
        super().__init__(f"Malformed stat value{label}: {token!r}")


class UnsupportedDieFace(RosterDataError):
    def __init__(self, faces: str, token: str | None = None) -> None:
        self.faces = faces
        self.token = token
        super().__init__(f"Unsupported die face D{faces} in {token!r}")


class UnknownCharacteristic(RosterDataError):
    def __init__(self, name: str, profile_kind: str | None = None) -> None:
        self.name = name
        self.profile_kind = profile_kind
        label = f" for {profile_kind} profile" if profile_kind else ""
        super().__init__(f"Unknown characteristic{label}: {name!r}")


class UnresolvableWounds(RosterDataError):
    def __init__(self, value: str | None, profile_name: str | None = None) -> None:
        self.value = value
        self.profile_name = profile_name
        super().__init__(
            f"Cannot resolve wounds from {value!r} (profile {profile_name!r})"
        )


class UnsupportedWeaponType(RosterDataError):
    def __init__(self, token: str | None) -> None:
        self.token = token
        super().__init__(f"Unsupported weapon type: {token!r}")


class UnhandledProfileType(RosterDataError):
    def __init__(self, type_name: str, where: str | None = None) -> None:
        self.type_name = type_name
        label = f" in {where}" if where else ""
        super().__init__(f"Unhandled profile type{label}: {type_name!r}")


class UnknownSelectionType(RosterDataError):
    def __init__(self, selection_type: str, where: str | None = None) -> None:
        self.selection_type = selection_type
        label = f" in {where}" if where else ""
        super().__init__(f"Unknown selection type{label}: {selection_type!r}")


class UnknownCostType(RosterDataError):
    def __init__(self, type_id: str, name: str | None = None) -> None:
        self.type_id = type_id
        self.name = name
        super().__init__(f"Unknown cost type id {type_id!r} (name {name!r})")


class MissingProfile(RosterDataError):
    def __init__(self, selection_name: str, detail: str) -> None:
        self.selection_name = selection_name
        super().__init__(f"{selection_name!r}: {detail}")


@contextmanager
def error_context(name: str | None) -> Iterator[None]:
    try:
        yield
    except RosterDataError as exc:
        exc.add_context(name)
        raise
