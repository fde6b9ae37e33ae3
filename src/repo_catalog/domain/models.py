"""Dataclass catalog entities with strict parsing and serialization."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import NoReturn

from repo_catalog.domain.errors import InvalidName
from repo_catalog.utils.fs import last_access_time

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _expect_object(
    value: object,
    path: str,
    *,
    required: set[str],
    optional: set[str] | None = None,
) -> dict[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")

    parsed: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[key] = item

    allowed = required | (optional or set())
    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")

    missing = sorted(key for key in required if key not in parsed)
    if missing:
        _fail(path, f"missing required fields: {missing}")

    return parsed


def _as_str(value: object, path: str, *, allow_empty: bool = False) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    if not allow_empty and not value.strip():
        _fail(path, "must not be empty")
    return value


def _as_optional_str(value: object, path: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, path, allow_empty=True)


def _as_bool(value: object, path: str) -> bool:
    if isinstance(value, bool):
        return value
    _fail(path, f"expected boolean, got {type(value).__name__}")


def _as_int(value: object, path: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    if minimum is not None and value < minimum:
        _fail(path, f"must be >= {minimum}")
    return value


def as_datetime(value: object, path: str) -> datetime:
    """Parse an ISO-8601 string, an aware datetime, or a ``secs/nanos`` epoch object."""

    parsed: datetime
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            _fail(path, f"invalid ISO-8601 datetime: {value!r} ({exc})")
    elif isinstance(value, Mapping):
        epoch = _expect_object(
            value, path, required={"secs_since_epoch"}, optional={"nanos_since_epoch"}
        )
        seconds = _as_int(epoch["secs_since_epoch"], f"{path}.secs_since_epoch")
        nanos = _as_int(epoch.get("nanos_since_epoch", 0), f"{path}.nanos_since_epoch", minimum=0)
        parsed = _EPOCH + timedelta(seconds=seconds, microseconds=nanos // 1000)
    else:
        _fail(path, f"expected datetime or ISO-8601 string, got {type(value).__name__}")

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        _fail(path, "datetime must be timezone-aware UTC")
    return parsed.astimezone(UTC)


def require_name(name: object, kind: str) -> str:
    """Return ``name`` unchanged, raising :class:`InvalidName` when it is blank."""

    if not isinstance(name, str) or not name.strip():
        raise InvalidName(kind, str(name))
    return name


def datetime_to_iso8601z(value: datetime) -> str:
    normalized = as_datetime(value, "datetime")
    return normalized.isoformat(timespec="microseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class Repository:
    """A tracked working copy. ``id`` is the identity; ``path`` is an attribute."""

    id: str
    path: Path
    description: str | None = None
    last_access: datetime | None = None

    def __post_init__(self) -> None:
        self.id = _as_str(self.id, "Repository.id")
        if not isinstance(self.path, Path):
            self.path = Path(_as_str(self.path, "Repository.path"))
        self.description = _as_optional_str(self.description, "Repository.description")
        if self.last_access is not None:
            self.last_access = as_datetime(self.last_access, "Repository.last_access")

    @classmethod
    def at_path(cls, id: str, path: Path | str, description: str | None = None) -> Repository:
        """Build a repository, reading its last-access time from the filesystem."""

        return cls(
            id=id,
            path=Path(path),
            description=description,
            last_access=last_access_time(path),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "id": self.id,
            "path": str(self.path),
            "description": self.description,
            "last_access": (
                None if self.last_access is None else datetime_to_iso8601z(self.last_access)
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Repository:
        parsed = _expect_object(
            data,
            "Repository",
            required={"id", "path"},
            optional={"description", "last_access"},
        )
        raw_access = parsed.get("last_access")
        return cls(
            id=_as_str(parsed["id"], "Repository.id"),
            path=Path(_as_str(parsed["path"], "Repository.path")),
            description=_as_optional_str(parsed.get("description"), "Repository.description"),
            last_access=(
                None if raw_access is None else as_datetime(raw_access, "Repository.last_access")
            ),
        )


@dataclass(slots=True)
class Group:
    name: str
    note: str = ""
    abbrev: bool = False

    def __post_init__(self) -> None:
        self.name = _as_str(self.name, "Group.name")
        self.note = _as_str(self.note, "Group.note", allow_empty=True)
        self.abbrev = _as_bool(self.abbrev, "Group.abbrev")

    @classmethod
    def named(cls, name: str) -> Group:
        return cls(name=name)

    def to_dict(self) -> dict[str, JSONValue]:
        return {"name": self.name, "note": self.note, "abbrev": self.abbrev}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Group:
        parsed = _expect_object(data, "Group", required={"name"}, optional={"note", "abbrev"})
        abbrev = parsed.get("abbrev")
        return cls(
            name=_as_str(parsed["name"], "Group.name"),
            note=_as_str(parsed.get("note", ""), "Group.note", allow_empty=True),
            abbrev=False if abbrev is None else _as_bool(abbrev, "Group.abbrev"),
        )


@dataclass(frozen=True, slots=True)
class Relation:
    """Membership edge: repository ``id`` belongs to group ``group``."""

    id: str
    group: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {"id": self.id, "group": self.group}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Relation:
        parsed = _expect_object(data, "Relation", required={"id", "group"})
        return cls(
            id=_as_str(parsed["id"], "Relation.id"),
            group=_as_str(parsed["group"], "Relation.group"),
        )


@dataclass(frozen=True, slots=True)
class RepositoryWithGroups:
    """Read-only join of a repository and the groups it belongs to."""

    repository: Repository
    groups: tuple[Group, ...] = field(default_factory=tuple)

    @property
    def group_names(self) -> tuple[str, ...]:
        return tuple(group.name for group in self.groups)


__all__ = [
    "Group",
    "JSONValue",
    "Relation",
    "Repository",
    "RepositoryWithGroups",
    "as_datetime",
    "datetime_to_iso8601z",
    "require_name",
    "utc_now",
]
