"""Catalog behaviour switches read from the ``[catalog]`` config section."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from repo_catalog.constants import DEFAULT_LAST_ACCESS_RELOAD_SECONDS


@dataclass(frozen=True, slots=True)
class CatalogPolicy:
    auto_create_group: bool = False
    last_access_reload_seconds: int = DEFAULT_LAST_ACCESS_RELOAD_SECONDS
    last_access_format: str = "humanize"
    print_list_style: str = "blank"

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> CatalogPolicy:
        """Build a policy from an effective (validated) config mapping."""

        section = config.get("catalog")
        if not isinstance(section, Mapping):
            return cls()
        defaults = cls()
        return cls(
            auto_create_group=bool(section.get("auto_create_group", defaults.auto_create_group)),
            last_access_reload_seconds=int(
                section.get("last_access_reload_duration_secs", defaults.last_access_reload_seconds)
            ),
            last_access_format=str(section.get("last_access_format", defaults.last_access_format)),
            print_list_style=str(section.get("print_list_style", defaults.print_list_style)),
        )


__all__ = ["CatalogPolicy"]
