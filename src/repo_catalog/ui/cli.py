"""Command-line interface router for repo-catalog."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Final, TypeVar

from repo_catalog.config import (
    ConfigLoadError,
    ConfigValidationError,
    assert_valid_config,
    dump_effective_config,
    format_setting,
    get_value,
    load_config,
    put_alias,
    read_document,
    remove_alias,
    resolve_config_path,
    set_value,
    unset_value,
    write_document,
)
from repo_catalog.domain.errors import (
    CatalogError,
    CatalogStorageError,
    GroupNotFound,
    RepositoryNotFound,
    iter_errors,
    raise_collected,
)
from repo_catalog.domain.models import Group, Repository, require_name
from repo_catalog.exporters import STDOUT_DESTINATION, ExportError, export_catalog
from repo_catalog.external import find_external_command, run_external_command, run_in_repositories
from repo_catalog.observability import setup_logging, shutdown_logging
from repo_catalog.persistence import SnapshotStore, load_snapshot, save_snapshot
from repo_catalog.ui.render import CLIRenderer, create_renderer
from repo_catalog.utils.text import format_humanize
from repo_catalog.workflows import (
    CatalogPolicy,
    GroupUpdate,
    NameKind,
    RepositoryUpdate,
    find_repositories,
    format_last_access,
    prune,
    recent_repositories,
    refresh_last_access,
    register_paths,
    remove_groups,
    remove_repositories,
    remove_targets,
    rename,
    resolve_targets,
    update_group,
    update_repository,
    with_groups,
)

logger = logging.getLogger(__name__)

COMMAND_NAMES: Final[frozenset[str]] = frozenset(
    {
        "add",
        "alias",
        "config",
        "exec",
        "export",
        "find",
        "group",
        "list",
        "prune",
        "recent",
        "remove",
        "rename",
        "repository",
        "rm",
    }
)
_GLOBAL_VALUE_OPTIONS: Final[frozenset[str]] = frozenset({"--config"})
_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


class RepositoryEntry(StrEnum):
    ID = "id"
    GROUPS = "groups"
    PATH = "path"
    DESCRIPTION = "description"
    LAST_ACCESS = "last_access"
    ALL = "all"


class GroupEntry(StrEnum):
    NAME = "name"
    NOTE = "note"
    ABBREV = "abbrev"
    COUNT = "count"
    ALL = "all"


_REPOSITORY_HEADERS: Final[Mapping[RepositoryEntry, str]] = {
    RepositoryEntry.ID: "ID",
    RepositoryEntry.GROUPS: "Groups",
    RepositoryEntry.PATH: "Path",
    RepositoryEntry.DESCRIPTION: "Description",
    RepositoryEntry.LAST_ACCESS: "Last Access",
}
_GROUP_HEADERS: Final[Mapping[GroupEntry, str]] = {
    GroupEntry.NAME: "Name",
    GroupEntry.NOTE: "Note",
    GroupEntry.ABBREV: "Abbrev",
    GroupEntry.COUNT: "Count",
}

_EntryT = TypeVar("_EntryT", RepositoryEntry, GroupEntry)


class CommandContext:
    """Per-invocation state shared by handlers; the catalog snapshot loads on first use."""

    def __init__(
        self,
        *,
        config: Mapping[str, Any],
        policy: CatalogPolicy,
        renderer: CLIRenderer,
        database: Path,
        config_path: Path,
        dry_run: bool = False,
    ) -> None:
        self.config = config
        self.policy = policy
        self.renderer = renderer
        self.database = database
        self.config_path = config_path
        self.dry_run = dry_run
        self._store: SnapshotStore | None = None

    @property
    def store(self) -> SnapshotStore:
        if self._store is None:
            self._store = load_snapshot(self.database)
        return self._store

    def should_persist(self, changed: bool) -> bool:
        if self._store is None or self.dry_run:
            return False
        return changed or self._store.refreshed


Handler = Callable[[argparse.Namespace, CommandContext], bool]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="rrh",
        description=(
            "rrh: a personal catalog of local source-code working copies.\n\n"
            "Common workflows:\n"
            "  rrh add ~/src/project -g work     Register a working copy into a group\n"
            "  rrh list                          List repositories per group\n"
            "  rrh exec -g work -- git status    Run a command in every group member\n"
            "  rrh prune --confirm               Drop empty groups and vanished paths\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the TOML config (default: $RRH_CONFIG_DIR/config.toml).",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=False, help="Show debug logging."
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=argparse.SUPPRESS,
        help="Path to the TOML config (default: $RRH_CONFIG_DIR/config.toml).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Show debug logging.",
    )

    mutating = argparse.ArgumentParser(add_help=False)
    mutating.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Apply the change in memory only; no file is written.",
    )

    repo_listing = argparse.ArgumentParser(add_help=False)
    repo_listing.add_argument(
        "-e",
        "--entry",
        dest="entries",
        action="extend",
        type=_split_csv,
        default=None,
        help="Columns to print: id, groups, path, description, last_access, all.",
    )
    _add_table_arguments(repo_listing)

    group_listing = argparse.ArgumentParser(add_help=False)
    group_listing.add_argument(
        "-e",
        "--entry",
        dest="entries",
        action="extend",
        type=_split_csv,
        default=None,
        help="Columns to print: name, note, abbrev, count, all (default: all).",
    )
    _add_table_arguments(group_listing)

    subparsers = parser.add_subparsers(dest="command", required=True)

    # add -----------------------------------------------------------------
    add_parser = subparsers.add_parser(
        "add",
        parents=[common, mutating],
        help="Register working-copy directories",
    )
    _add_register_arguments(add_parser)

    # list ----------------------------------------------------------------
    list_parser = subparsers.add_parser(
        "list",
        parents=[common, repo_listing],
        help="List repositories per group",
    )
    list_parser.add_argument("groups", nargs="*", help="Groups to list (default: all)")
    list_parser.set_defaults(handler=_cmd_list)

    # repository ----------------------------------------------------------
    repository_parser = subparsers.add_parser("repository", help="Manage repositories")
    repository_sub = repository_parser.add_subparsers(dest="repository_command", required=True)

    repository_add = repository_sub.add_parser(
        "add", parents=[common, mutating], help="Register working-copy directories"
    )
    _add_register_arguments(repository_add)

    repository_list = repository_sub.add_parser(
        "list", parents=[common, repo_listing], help="List repositories per group"
    )
    repository_list.add_argument("groups", nargs="*", help="Groups to list (default: all)")
    repository_list.set_defaults(handler=_cmd_list)

    repository_info = repository_sub.add_parser(
        "info", parents=[common, repo_listing], help="Show repository details"
    )
    repository_info.add_argument("ids", nargs="+", help="Repository ids")
    repository_info.set_defaults(handler=_cmd_repository_info)

    repository_remove = repository_sub.add_parser(
        "remove", parents=[common, mutating], help="Remove repositories"
    )
    repository_remove.add_argument("ids", nargs="+", help="Repository ids")
    repository_remove.set_defaults(handler=_cmd_repository_remove)

    repository_update = repository_sub.add_parser(
        "update", parents=[common, mutating], help="Update a repository"
    )
    repository_update.add_argument("repository_id", help="Repository to update")
    repository_update.add_argument("-i", "--id", dest="new_id", default=None, help="New id")
    repository_update.add_argument("-p", "--path", default=None, help="New path")
    repository_update.add_argument("-d", "--description", default=None, help="New description")
    repository_update.add_argument(
        "-g",
        "--groups",
        action="extend",
        type=_split_csv,
        default=None,
        help="Groups to add (comma separated)",
    )
    repository_update.add_argument(
        "-G",
        "--new-groups",
        dest="new_groups",
        action="extend",
        type=_split_csv,
        default=None,
        help="Groups replacing every current membership (comma separated)",
    )
    repository_update.set_defaults(handler=_cmd_repository_update)

    # group ---------------------------------------------------------------
    group_parser = subparsers.add_parser("group", help="Manage groups")
    group_sub = group_parser.add_subparsers(dest="group_command", required=True)

    group_add = group_sub.add_parser("add", parents=[common, mutating], help="Create groups")
    group_add.add_argument("names", nargs="+", help="Group names")
    group_add.add_argument("-n", "--note", default="", help="Note for the new groups")
    group_add.add_argument(
        "-a", "--abbrev", action="store_true", default=False, help="Summarize in listings"
    )
    group_add.set_defaults(handler=_cmd_group_add)

    group_list = group_sub.add_parser("list", parents=[common, group_listing], help="List groups")
    group_list.add_argument("names", nargs="*", help="Groups to show (default: all)")
    group_list.set_defaults(handler=_cmd_group_list)

    group_of = group_sub.add_parser(
        "of", parents=[common, group_listing], help="Show the groups of repositories"
    )
    group_of.add_argument("ids", nargs="+", help="Repository ids")
    group_of.set_defaults(handler=_cmd_group_of)

    group_info = group_sub.add_parser("info", parents=[common], help="Show group details")
    group_info.add_argument("names", nargs="+", help="Group names")
    group_info.set_defaults(handler=_cmd_group_info)

    group_remove = group_sub.add_parser(
        "remove", parents=[common, mutating], help="Remove groups"
    )
    group_remove.add_argument("names", nargs="+", help="Group names")
    group_remove.add_argument(
        "--force", action="store_true", default=False, help="Remove groups that still have members"
    )
    group_remove.set_defaults(handler=_cmd_group_remove)

    group_update = group_sub.add_parser("update", parents=[common, mutating], help="Update a group")
    group_update.add_argument("name", help="Group to update")
    group_update.add_argument("-r", "--rename-to", dest="rename_to", default=None, help="New name")
    group_update.add_argument("-N", "--note", default=None, help="New note")
    group_update.add_argument(
        "-a", "--abbrev", type=_parse_bool, default=None, help="Abbreviate flag (true|false)"
    )
    group_update.set_defaults(handler=_cmd_group_update)

    # find / recent -------------------------------------------------------
    find_parser = subparsers.add_parser(
        "find", parents=[common, repo_listing], help="Find repositories by keyword"
    )
    find_parser.add_argument(
        "keywords", nargs="+", help="Keywords matched against id, path and description"
    )
    find_parser.add_argument(
        "--and",
        dest="match_all",
        action="store_true",
        default=False,
        help="Require every keyword (default: any keyword)",
    )
    find_parser.set_defaults(handler=_cmd_find)

    recent_parser = subparsers.add_parser(
        "recent", parents=[common, repo_listing], help="List recently accessed repositories"
    )
    recent_parser.add_argument(
        "-n", "--number", type=_non_negative_int, default=None, help="How many to show (default: 5)"
    )
    recent_parser.set_defaults(handler=_cmd_recent)

    # remove / rename / prune ---------------------------------------------
    remove_parser = subparsers.add_parser(
        "remove",
        aliases=["rm"],
        parents=[common, mutating],
        help="Remove repositories or groups by name",
    )
    remove_parser.add_argument("targets", nargs="+", help="Repository ids or group names")
    remove_parser.add_argument(
        "--force", action="store_true", default=False, help="Remove groups that still have members"
    )
    remove_parser.set_defaults(handler=_cmd_remove)

    rename_parser = subparsers.add_parser(
        "rename", parents=[common, mutating], help="Rename a repository or group"
    )
    rename_parser.add_argument("from_name", metavar="FROM", help="Current name")
    rename_parser.add_argument("to_name", metavar="TO", help="New name")
    kind_group = rename_parser.add_mutually_exclusive_group()
    kind_group.add_argument(
        "--repository",
        dest="kind",
        action="store_const",
        const=NameKind.REPOSITORY,
        default=None,
        help="Treat FROM as a repository id",
    )
    kind_group.add_argument(
        "--group",
        dest="kind",
        action="store_const",
        const=NameKind.GROUP,
        help="Treat FROM as a group name",
    )
    rename_parser.set_defaults(handler=_cmd_rename)

    prune_parser = subparsers.add_parser(
        "prune",
        parents=[common, mutating],
        help="Delete empty groups and repositories whose path is gone",
    )
    prune_parser.add_argument(
        "--confirm", action="store_true", default=False, help="Ask before deleting"
    )
    prune_parser.set_defaults(handler=_cmd_prune)

    # export / exec -------------------------------------------------------
    export_parser = subparsers.add_parser(
        "export", parents=[common], help="Export the catalog as JSON or YAML"
    )
    export_parser.add_argument(
        "-d",
        "--dest",
        default=STDOUT_DESTINATION,
        help='Destination file; "-" means stdout (default: -)',
    )
    export_parser.add_argument(
        "-f",
        "--format",
        dest="export_format",
        choices=("json", "yaml"),
        default=None,
        help="Output format (default: inferred from --dest, json for stdout)",
    )
    export_parser.add_argument(
        "-o", "--overwrite", action="store_true", default=False, help="Replace an existing file"
    )
    export_parser.add_argument(
        "--no-replace-home",
        action="store_true",
        default=False,
        help='Keep home-directory paths instead of writing "${HOME}"',
    )
    export_parser.add_argument(
        "-i", "--indent", action="store_true", default=False, help="Indent JSON output"
    )
    export_parser.set_defaults(handler=_cmd_export)

    exec_parser = subparsers.add_parser(
        "exec",
        parents=[common],
        help="Run a command in repositories",
        description=(
            "Run a command in every selected repository.\n\n"
            "Examples:\n"
            "  rrh exec -g work -- git status\n"
            "  rrh exec -r project --no-header -- git log -1\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    exec_parser.add_argument(
        "-g", "--group", dest="groups", action="append", default=None, help="Target group"
    )
    exec_parser.add_argument(
        "-r",
        "--repository",
        dest="repositories",
        action="append",
        default=None,
        help="Target repository",
    )
    exec_parser.add_argument(
        "--no-header", action="store_true", default=False, help="Do not print repository headers"
    )
    exec_parser.add_argument("arguments", nargs=argparse.REMAINDER, help="Command to run")
    exec_parser.set_defaults(handler=_cmd_exec)

    # config / alias ------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common, mutating],
        help="Show, set or unset configuration values",
        description=(
            "Without KEY print the effective configuration; with KEY print one value;\n"
            "with KEY VALUE store the value in the config file.\n\n"
            "Examples:\n"
            "  rrh config catalog.auto_create_group true\n"
            "  rrh config --unset catalog.print_list_style\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.add_argument(
        "key", nargs="?", default=None, help="Dotted key, e.g. catalog.auto_create_group"
    )
    config_parser.add_argument("value", nargs="?", default=None, help="New value for KEY")
    config_parser.add_argument(
        "-u", "--unset", action="store_true", default=False, help="Remove KEY from the config file"
    )
    config_parser.set_defaults(handler=_cmd_config)

    alias_parser = subparsers.add_parser(
        "alias",
        parents=[common, mutating],
        help="List, register, update or remove command aliases",
        description=(
            "Without NAME list every alias; with NAME and a command register it.\n\n"
            "Examples:\n"
            "  rrh alias ls list -e id,path\n"
            "  rrh alias --update ls list -e all\n"
            "  rrh alias --remove ls\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    alias_mode = alias_parser.add_mutually_exclusive_group()
    alias_mode.add_argument(
        "-u", "--update", action="store_true", default=False, help="Replace an existing alias"
    )
    alias_mode.add_argument(
        "-r", "--remove", action="store_true", default=False, help="Remove an alias"
    )
    alias_parser.add_argument("name", nargs="?", default=None, help="Alias name")
    alias_parser.add_argument(
        "arguments", nargs=argparse.REMAINDER, help="Command line the alias expands to"
    )
    alias_parser.set_defaults(handler=_cmd_alias)

    return parser


def _add_table_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-header", action="store_true", default=False, help="Do not print the header row"
    )
    parser.add_argument(
        "-f",
        "--format",
        default=None,
        help="Table layout: blank, empty, ascii, psql, markdown, csv, rounded.",
    )


def _add_register_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="+", help="Working-copy directories")
    parser.add_argument(
        "-r", "--repository-id", dest="repository_id", default=None, help="Repository id"
    )
    parser.add_argument(
        "-g", "--group", dest="groups", action="append", default=None, help="Group to join"
    )
    parser.add_argument("-d", "--description", default=None, help="Description")
    parser.set_defaults(handler=_cmd_add)


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    arguments = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    try:
        arguments = _expand_alias(arguments)
        external = _external_command(arguments)
        if external is not None:
            return external()

        namespace = parser.parse_args(arguments)
        handler = getattr(namespace, "handler", None)
        if not callable(handler):
            parser.print_help(sys.stderr)
            return 2
        return _dispatch(handler, namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    except CatalogError as exc:
        for item in iter_errors(exc):
            print(f"error: {item}", file=sys.stderr)
        return 3 if isinstance(exc, CatalogStorageError) else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


def _dispatch(handler: Handler, args: argparse.Namespace) -> int:
    config = _load_effective_config(_optional_str(getattr(args, "config_path", None)))
    setup_logging(config.get("observability"), verbose=_flag(args, "verbose"))
    try:
        context = _build_context(args, config)
        changed = bool(handler(args, context))
        if context.should_persist(changed):
            save_snapshot(context.store, context.database)
        elif changed and context.dry_run:
            logger.info("dry run: %s left unchanged", context.database)
    except (ExportError, ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    finally:
        shutdown_logging()
    return 0


def _build_context(args: argparse.Namespace, config: Mapping[str, Any]) -> CommandContext:
    policy = CatalogPolicy.from_config(config)
    style = _optional_str(getattr(args, "format", None)) or policy.print_list_style
    return CommandContext(
        config=config,
        policy=policy,
        renderer=create_renderer(style=style, verbose=_flag(args, "verbose")),
        database=Path(config["paths"]["database"]),
        config_path=resolve_config_path(_optional_str(getattr(args, "config_path", None))),
        dry_run=_flag(args, "dry_run"),
    )


# ---------------------------------------------------------------------------
# Alias expansion and external commands
# ---------------------------------------------------------------------------


def _command_position(arguments: Sequence[str]) -> int | None:
    index = 0
    while index < len(arguments):
        token = arguments[index]
        if token in _GLOBAL_VALUE_OPTIONS:
            index += 2
            continue
        if token == "--":
            return None
        if token.startswith("-"):
            index += 1
            continue
        return index
    return None


def _peek_config_path(arguments: Sequence[str]) -> str | None:
    for index, token in enumerate(arguments):
        if token == "--config" and index + 1 < len(arguments):
            return arguments[index + 1]
        if token.startswith("--config="):
            return token.split("=", 1)[1]
    return None


def _expand_alias(arguments: list[str]) -> list[str]:
    """Replace an unknown command word with its configured alias, once."""

    position = _command_position(arguments)
    if position is None or arguments[position] in COMMAND_NAMES:
        return arguments
    config = _load_effective_config(_peek_config_path(arguments))
    aliases = config.get("aliases", {})
    expansion = aliases.get(arguments[position]) if isinstance(aliases, Mapping) else None
    if not expansion:
        return arguments
    logger.debug("expanding alias %s", arguments[position])
    return [*arguments[:position], *expansion, *arguments[position + 1 :]]


def _external_command(arguments: Sequence[str]) -> Callable[[], int] | None:
    """Return a runner for ``rrh-<name>`` when the command word is not built in."""

    position = _command_position(arguments)
    if position is None or arguments[position] in COMMAND_NAMES:
        return None
    executable = find_external_command(arguments[position])
    if executable is None:
        return None
    rest = list(arguments[position + 1 :])

    def run() -> int:
        run_external_command(executable, rest, emit=print)
        return 0

    return run


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_add(args: argparse.Namespace, ctx: CommandContext) -> bool:
    registered = register_paths(
        ctx.store,
        list(args.paths),
        repository_id=_optional_str(args.repository_id),
        description=args.description,
        groups=_string_sequence(args.groups),
    )
    return bool(registered)


def _cmd_list(args: argparse.Namespace, ctx: CommandContext) -> bool:
    store = ctx.store
    entries = _repository_entries(args.entries)
    names = _string_sequence(args.groups)

    if names:
        result: dict[str, list[Repository]] = {}
        errors: list[CatalogError] = []
        for name in dict.fromkeys(names):
            if store.find_group(name) is None:
                errors.append(GroupNotFound(name))
                continue
            result[name] = store.find_repositories_of(name)
        raise_collected(errors)
    else:
        result = store.group_repositories()

    result = {name: _fresh(ctx, repositories, entries) for name, repositories in result.items()}
    if len(entries) == 1 and len(result) == 1:
        name, repositories = next(iter(result.items()))
        ctx.renderer.items([_repository_row(ctx, entries, repo, name)[0] for repo in repositories])
        return False

    headers = _repository_headers(args, entries)
    for name, repositories in result.items():
        group = store.find_group(name)
        if group is not None and group.abbrev and len(result) > 1:
            summary = format_humanize(len(repositories), "repository", "repositories")
            ctx.renderer.table(None, [["Group", name, summary]])
            continue
        rows = [_repository_row(ctx, entries, repo, name) for repo in repositories]
        ctx.renderer.table(headers, rows)
    return False


def _cmd_repository_info(args: argparse.Namespace, ctx: CommandContext) -> bool:
    entries = _repository_entries(args.entries, default=(RepositoryEntry.ALL,))
    found: list[Repository] = []
    errors: list[CatalogError] = []
    for repository_id in args.ids:
        repository = ctx.store.find_repository(repository_id)
        if repository is None:
            errors.append(RepositoryNotFound(repository_id))
            continue
        found.append(repository)
    if found:
        _print_repositories(ctx, args, found, entries)
    raise_collected(errors)
    return False


def _cmd_repository_remove(args: argparse.Namespace, ctx: CommandContext) -> bool:
    return bool(remove_repositories(ctx.store, list(args.ids)))


def _cmd_repository_update(args: argparse.Namespace, ctx: CommandContext) -> bool:
    update = RepositoryUpdate(
        new_id=_optional_str(args.new_id),
        path=Path(args.path).expanduser() if args.path else None,
        description=args.description,
        groups=_string_sequence(args.groups),
        new_groups=_string_sequence(args.new_groups),
    )
    update_repository(ctx.store, args.repository_id, update, policy=ctx.policy)
    return True


def _cmd_group_add(args: argparse.Namespace, ctx: CommandContext) -> bool:
    errors: list[CatalogError] = []
    for name in dict.fromkeys(args.names):
        try:
            require_name(name, "group")
            ctx.store.register_group(Group(name=name, note=args.note or "", abbrev=args.abbrev))
        except CatalogError as exc:
            errors.append(exc)
    raise_collected(errors)
    return True


def _cmd_group_list(args: argparse.Namespace, ctx: CommandContext) -> bool:
    errors: list[CatalogError] = []
    if args.names:
        groups: list[Group] = []
        for name in args.names:
            group = ctx.store.find_group(name)
            if group is None:
                errors.append(GroupNotFound(name))
                continue
            groups.append(group)
    else:
        groups = ctx.store.groups()
    _print_groups(ctx, args, groups)
    raise_collected(errors)
    return False


def _cmd_group_of(args: argparse.Namespace, ctx: CommandContext) -> bool:
    errors: list[CatalogError] = []
    for repository_id in args.ids:
        if ctx.store.find_repository(repository_id) is None:
            errors.append(RepositoryNotFound(repository_id))
            continue
        groups = ctx.store.find_groups_of(repository_id)
        count = format_humanize(len(groups), "group", "groups")
        ctx.renderer.text(f'"{repository_id}"\'s {count}:')
        _print_groups(ctx, args, groups)
    raise_collected(errors)
    return False


def _cmd_group_info(args: argparse.Namespace, ctx: CommandContext) -> bool:
    errors: list[CatalogError] = []
    for index, name in enumerate(args.names):
        group = ctx.store.find_group(name)
        if group is None:
            errors.append(GroupNotFound(name))
            continue
        if index:
            ctx.renderer.blank()
        members = [repository.id for repository in ctx.store.find_repositories_of(name)]
        ctx.renderer.kv("Name", group.name)
        ctx.renderer.kv("Note", group.note)
        ctx.renderer.kv("Abbrev", str(group.abbrev).lower())
        ctx.renderer.kv("Repositories", ", ".join(members))
    raise_collected(errors)
    return False


def _cmd_group_remove(args: argparse.Namespace, ctx: CommandContext) -> bool:
    return bool(remove_groups(ctx.store, list(args.names), force=_flag(args, "force")))


def _cmd_group_update(args: argparse.Namespace, ctx: CommandContext) -> bool:
    update = GroupUpdate(
        new_name=_optional_str(args.rename_to),
        note=args.note,
        abbrev=args.abbrev,
    )
    update_group(ctx.store, args.name, update)
    return True


def _cmd_find(args: argparse.Namespace, ctx: CommandContext) -> bool:
    entries = _repository_entries(args.entries)
    hits = find_repositories(ctx.store, list(args.keywords), match_all=_flag(args, "match_all"))
    _print_repositories(ctx, args, [item.repository for item in hits], entries)
    return False


def _cmd_recent(args: argparse.Namespace, ctx: CommandContext) -> bool:
    entries = _repository_entries(
        args.entries, default=(RepositoryEntry.ID, RepositoryEntry.LAST_ACCESS)
    )
    _fresh(ctx, ctx.store.repositories(), (RepositoryEntry.LAST_ACCESS,))
    if args.number is None:
        recent = recent_repositories(ctx.store)
    else:
        recent = recent_repositories(ctx.store, args.number)
    _print_repositories(ctx, args, [item.repository for item in recent], entries)
    return False


def _cmd_remove(args: argparse.Namespace, ctx: CommandContext) -> bool:
    return bool(remove_targets(ctx.store, list(args.targets), force=_flag(args, "force")))


def _cmd_rename(args: argparse.Namespace, ctx: CommandContext) -> bool:
    kind = rename(ctx.store, args.from_name, args.to_name, kind=args.kind, policy=ctx.policy)
    logger.info("renamed %s %s to %s", kind.value, args.from_name, args.to_name)
    return True


def _cmd_prune(args: argparse.Namespace, ctx: CommandContext) -> bool:
    confirm = _prompt_confirmation if _flag(args, "confirm") else None
    result = prune(ctx.store, confirm=confirm, dry_run=ctx.dry_run)
    if ctx.dry_run or ctx.renderer.verbose:
        for group in result.candidates.groups:
            ctx.renderer.text(f"{group.name}: empty group")
        for repository in result.candidates.repositories:
            ctx.renderer.text(f"{repository.id}: {repository.path} does not exist")
    return result.deleted


def _cmd_export(args: argparse.Namespace, ctx: CommandContext) -> bool:
    export_catalog(
        ctx.store,
        args.dest,
        fmt=args.export_format,
        overwrite=_flag(args, "overwrite"),
        replace_home_dir=not _flag(args, "no_replace_home"),
        indent=_flag(args, "indent"),
        stdout=sys.stdout,
    )
    return False


def _cmd_exec(args: argparse.Namespace, ctx: CommandContext) -> bool:
    command = list(args.arguments)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        raise CLIError("exec: no command given", exit_code=2)
    targets = resolve_targets(
        ctx.store, _string_sequence(args.groups), _string_sequence(args.repositories)
    )
    run_in_repositories(
        command,
        targets,
        emit=ctx.renderer.text,
        header=not _flag(args, "no_header"),
    )
    return False


def _cmd_config(args: argparse.Namespace, ctx: CommandContext) -> bool:
    key = _optional_str(args.key)
    unset = _flag(args, "unset")
    if key is None:
        if unset or args.value is not None:
            raise CLIError("config: no key given", exit_code=2)
        ctx.renderer.text(dump_effective_config(ctx.config))
        return False

    if unset:
        if args.value is not None:
            raise CLIError("config: --unset takes no value", exit_code=2)
        document = unset_value(read_document(ctx.config_path), key)
    elif args.value is None:
        ctx.renderer.text(format_setting(key, get_value(ctx.config, key)))
        return False
    else:
        document = set_value(read_document(ctx.config_path), key, args.value)
    write_document(ctx.config_path, document, dry_run=ctx.dry_run)
    return False


def _cmd_alias(args: argparse.Namespace, ctx: CommandContext) -> bool:
    name = _optional_str(args.name)
    arguments = list(args.arguments)
    if arguments and arguments[0] == "--":
        arguments = arguments[1:]
    update = _flag(args, "update")
    remove = _flag(args, "remove")
    aliases = ctx.config.get("aliases", {})

    if name is None:
        if update or remove or arguments:
            raise CLIError("alias: no alias name given", exit_code=2)
        for alias in sorted(aliases):
            ctx.renderer.text(f"{alias} = {' '.join(aliases[alias])}")
        return False

    if remove:
        if arguments:
            raise CLIError("alias: --remove takes no command", exit_code=2)
        document = remove_alias(read_document(ctx.config_path), name)
    elif not arguments and not update:
        if name not in aliases:
            raise CLIError(f"{name}: alias not found", exit_code=2)
        ctx.renderer.text(f"{name} = {' '.join(aliases[name])}")
        return False
    else:
        if name in COMMAND_NAMES:
            raise CLIError(f"{name}: alias would shadow a built-in command", exit_code=2)
        document = put_alias(read_document(ctx.config_path), name, arguments, update=update)
    write_document(ctx.config_path, document, dry_run=ctx.dry_run)
    return False


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _parse_entries(
    raw: Sequence[str] | None,
    kind: type[_EntryT],
    *,
    default: Sequence[_EntryT],
) -> tuple[_EntryT, ...]:
    chosen: list[_EntryT] = []
    for item in raw or ():
        key = item.strip().lower().replace("-", "_")
        try:
            chosen.append(kind(key))
        except ValueError as exc:
            raise CLIError(f"{item}: unknown entry", exit_code=2) from exc
    if not chosen:
        chosen = list(default)
    if kind.ALL in chosen:
        return tuple(entry for entry in kind if entry is not kind.ALL)
    return tuple(entry for entry in kind if entry in chosen)


def _repository_entries(
    raw: Sequence[str] | None,
    *,
    default: Sequence[RepositoryEntry] = (RepositoryEntry.ID,),
) -> tuple[RepositoryEntry, ...]:
    return _parse_entries(raw, RepositoryEntry, default=default)


def _repository_headers(
    args: argparse.Namespace, entries: Sequence[RepositoryEntry]
) -> list[str] | None:
    if _flag(args, "no_header"):
        return None
    return [_REPOSITORY_HEADERS[entry] for entry in entries]


def _repository_row(
    ctx: CommandContext,
    entries: Sequence[RepositoryEntry],
    repository: Repository,
    groups: str,
) -> list[str]:
    values = {
        RepositoryEntry.ID: repository.id,
        RepositoryEntry.GROUPS: groups,
        RepositoryEntry.PATH: str(repository.path),
        RepositoryEntry.DESCRIPTION: repository.description or "",
    }
    if RepositoryEntry.LAST_ACCESS in entries:
        values[RepositoryEntry.LAST_ACCESS] = format_last_access(repository, ctx.policy)
    return [values[entry] for entry in entries]


def _fresh(
    ctx: CommandContext,
    repositories: Sequence[Repository],
    entries: Sequence[RepositoryEntry],
) -> list[Repository]:
    """Refresh stale last-access values when they are about to be shown."""

    if RepositoryEntry.LAST_ACCESS not in entries:
        return list(repositories)
    refreshed: list[Repository] = []
    for repository in repositories:
        refresh_last_access(ctx.store, repository.id, policy=ctx.policy)
        refreshed.append(ctx.store.find_repository(repository.id) or repository)
    return refreshed


def _print_repositories(
    ctx: CommandContext,
    args: argparse.Namespace,
    repositories: Sequence[Repository],
    entries: Sequence[RepositoryEntry],
) -> None:
    fresh = _fresh(ctx, repositories, entries)
    rows = [
        _repository_row(ctx, entries, item.repository, ", ".join(item.group_names))
        for item in with_groups(ctx.store, fresh)
    ]
    ctx.renderer.table(_repository_headers(args, entries), rows)


def _print_groups(ctx: CommandContext, args: argparse.Namespace, groups: Sequence[Group]) -> None:
    entries = _parse_entries(args.entries, GroupEntry, default=(GroupEntry.ALL,))
    headers = None if _flag(args, "no_header") else [_GROUP_HEADERS[entry] for entry in entries]
    rows: list[list[str]] = []
    for group in groups:
        values = {
            GroupEntry.NAME: group.name,
            GroupEntry.NOTE: group.note,
            GroupEntry.ABBREV: str(group.abbrev).lower(),
            GroupEntry.COUNT: str(len(ctx.store.find_relations_with_group(group.name))),
        }
        rows.append([values[entry] for entry in entries])
    ctx.renderer.table(headers, rows)


def _prompt_confirmation(message: str) -> bool:
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


# ---------------------------------------------------------------------------
# Config and argument helpers
# ---------------------------------------------------------------------------


def _load_effective_config(config_path: str | None) -> dict[str, Any]:
    try:
        loaded = load_config(config_path)
        validated = assert_valid_config(loaded)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    return {key: value for key, value in validated.items()}


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument", exit_code=2)
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    value = getattr(args, name, False)
    return bool(value)


def _string_sequence(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        cleaned = value.strip()
        return (cleaned,) if cleaned else ()
    if isinstance(value, Sequence):
        return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
    raise CLIError("invalid string list argument", exit_code=2)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return parsed


__all__ = [
    "COMMAND_NAMES",
    "CLIError",
    "CommandContext",
    "GroupEntry",
    "RepositoryEntry",
    "build_parser",
    "main",
    "run_cli",
]
