"""Command-line grammar: the declarative command tree and its argparse parser."""

from __future__ import annotations

import argparse
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

PROG = "plnk"
VERSION = "0.2.0"

# argparse destination that records the chosen subcommand at each depth.
_SUBCOMMAND_DESTS = ("command", "action", "subaction")


class OutputFormat(str, Enum):
    """How results are rendered."""

    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"

    def __str__(self) -> str:
        return self.value


class ArgKind(Enum):
    """How an argument consumes the command line."""

    VALUE = "value"
    FLAG = "flag"
    COUNT = "count"
    APPEND = "append"


@dataclass(frozen=True)
class ArgSpec:
    """One argument or option of a command."""

    id: str
    help: str = ""
    kind: ArgKind = ArgKind.VALUE
    positional: bool = False
    required: bool = False
    long: str | None = None
    short: str | None = None
    value_type: Callable[[str], Any] = str
    default: Any = None
    group: str | None = None
    env: str | None = None
    is_global: bool = False

    def __post_init__(self) -> None:
        if not self.positional and self.long is None:
            object.__setattr__(self, "long", self.id.replace("_", "-"))


@dataclass(frozen=True)
class CommandSpec:
    """A command, its arguments and its subcommands."""

    name: str
    about: str = ""
    args: tuple[ArgSpec, ...] = ()
    subcommands: tuple[CommandSpec, ...] = ()
    hidden: bool = False
    long_about: str | None = None

    def find_subcommand(self, name: str) -> CommandSpec | None:
        """Return the direct subcommand called ``name``, if any."""
        return next((sub for sub in self.subcommands if sub.name == name), None)


# ── Value parsers ─────────────────────────────────────────────────────────


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected a non-negative integer, got {text!r}"
        ) from None
    if value < 0:
        raise argparse.ArgumentTypeError(
            f"expected a non-negative integer, got {text!r}"
        )
    return value


def _concurrency(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {text!r}") from None
    if not 1 <= value <= 16:
        raise argparse.ArgumentTypeError(f"{value} is not in 1..=16")
    return value


def _output_format(text: str) -> OutputFormat:
    try:
        return OutputFormat(text)
    except ValueError:
        choices = ", ".join(fmt.value for fmt in OutputFormat)
        raise argparse.ArgumentTypeError(
            f"invalid value {text!r} (possible values: {choices})"
        ) from None


# ── Tree builders ─────────────────────────────────────────────────────────


def _pos(id: str, help: str) -> ArgSpec:
    return ArgSpec(id, help, positional=True, required=True)


def _opt(
    id: str,
    help: str,
    *,
    required: bool = False,
    value_type: Callable[[str], Any] = str,
    group: str | None = None,
    default: Any = None,
) -> ArgSpec:
    return ArgSpec(
        id,
        help,
        required=required,
        value_type=value_type,
        group=group,
        default=default,
    )


def _req(id: str, help: str, value_type: Callable[[str], Any] = str) -> ArgSpec:
    return _opt(id, help, required=True, value_type=value_type)


def _flag(id: str, help: str, *, is_global: bool = False) -> ArgSpec:
    return ArgSpec(id, help, kind=ArgKind.FLAG, default=False, is_global=is_global)


def _many(id: str, help: str, *, required: bool = False) -> ArgSpec:
    return ArgSpec(id, help, kind=ArgKind.APPEND, required=required, default=())


def _cmd(
    name: str,
    about: str,
    *args: ArgSpec,
    subcommands: Sequence[CommandSpec] = (),
    hidden: bool = False,
) -> CommandSpec:
    return CommandSpec(
        name, about, tuple(args), tuple(subcommands), hidden=hidden
    )


_LABEL_FILTER_HELP = (
    "Board-scoped label ID or name (repeat for AND semantics; "
    "use an ID to avoid ambiguity)"
)

_GLOBAL_ARGS: tuple[ArgSpec, ...] = (
    ArgSpec("server", "Planka server URL", env="PLANKA_SERVER", is_global=True),
    ArgSpec("token", "API token", env="PLANKA_TOKEN", is_global=True),
    ArgSpec(
        "output",
        "Output format",
        value_type=_output_format,
        default=OutputFormat.TABLE,
        is_global=True,
    ),
    ArgSpec(
        "verbose",
        "Increase verbosity (-v, -vv, -vvv)",
        kind=ArgKind.COUNT,
        short="v",
        default=0,
        is_global=True,
    ),
    _flag("quiet", "Suppress all output", is_global=True),
    _flag("no_color", "Disable colored output", is_global=True),
    _flag("yes", "Skip confirmation prompts", is_global=True),
    _flag(
        "full",
        "Show all fields (default output is trimmed to essentials)",
        is_global=True,
    ),
    ArgSpec(
        "http_max_in_flight",
        "Max in-flight HTTP requests per process",
        value_type=_non_negative_int,
        is_global=True,
    ),
    ArgSpec(
        "http_rate_limit",
        "Sustained HTTP request rate limit (requests/sec)",
        value_type=_non_negative_int,
        is_global=True,
    ),
    ArgSpec(
        "http_burst",
        "HTTP rate-limit burst size",
        value_type=_non_negative_int,
        is_global=True,
    ),
    ArgSpec(
        "retry_attempts",
        "Retry attempts after the initial HTTP request",
        value_type=_non_negative_int,
        is_global=True,
    ),
    ArgSpec(
        "retry_base_delay_ms",
        "Base retry delay in milliseconds",
        value_type=_non_negative_int,
        is_global=True,
    ),
    ArgSpec(
        "retry_max_delay_ms",
        "Maximum retry delay in milliseconds",
        value_type=_non_negative_int,
        is_global=True,
    ),
    _flag("no_retry", "Disable automatic HTTP retries", is_global=True),
)


def _auth() -> CommandSpec:
    return _cmd(
        "auth",
        "Manage authentication",
        subcommands=(
            _cmd(
                "login",
                "Log in with email and password",
                _opt("server", "Planka server URL (overrides --server)"),
                _opt("email", "Email address"),
                _opt("password", "Password (will prompt if not given)"),
            ),
            _cmd(
                "token",
                "Set an API token directly",
                subcommands=(
                    _cmd(
                        "set",
                        "Store an API token in the config file",
                        _pos("token", "The API token"),
                        _opt("server", "Planka server URL"),
                    ),
                ),
            ),
            _cmd("whoami", "Show current authenticated user"),
            _cmd("logout", "Remove stored credentials"),
            _cmd("status", "Show credential source and validation status"),
        ),
    )


def _project() -> CommandSpec:
    return _cmd(
        "project",
        "Manage projects",
        subcommands=(
            _cmd("list", "List all projects"),
            _cmd("get", "Get a project by ID", _pos("id", "Project ID")),
            _cmd(
                "snapshot",
                "Get the full snapshot (item + included) for a project — JSON only",
                _pos("id", "Project ID"),
            ),
            _cmd(
                "find",
                "Find projects by name (unscoped — projects are the root resource)",
                _req("name", "Project name to search for"),
            ),
            _cmd("create", "Create a new project", _req("name", "Project name")),
            _cmd(
                "update",
                "Update a project",
                _pos("id", "Project ID"),
                _opt("name", "New project name"),
            ),
            _cmd("delete", "Delete a project", _pos("id", "Project ID")),
        ),
    )


def _board() -> CommandSpec:
    return _cmd(
        "board",
        "Manage boards",
        subcommands=(
            _cmd(
                "list",
                "List boards in a project",
                _req("project", "Parent project ID"),
            ),
            _cmd("get", "Get a board by ID", _pos("id", "Board ID")),
            _cmd(
                "snapshot",
                "Get the full snapshot (item + included) for a board — JSON only",
                _pos("id", "Board ID"),
            ),
            _cmd(
                "find",
                "Find boards by name within a project",
                _req("project", "Parent project ID"),
                _req("name", "Board name to search for"),
            ),
            _cmd(
                "create",
                "Create a new board",
                _req("project", "Parent project ID"),
                _req("name", "Board name"),
            ),
            _cmd(
                "update",
                "Update a board",
                _pos("id", "Board ID"),
                _opt("name", "New board name"),
            ),
            _cmd("delete", "Delete a board", _pos("id", "Board ID")),
        ),
    )


def _list() -> CommandSpec:
    return _cmd(
        "list",
        "Manage lists",
        subcommands=(
            _cmd("list", "List lists in a board", _req("board", "Parent board ID")),
            _cmd("get", "Get a list by ID", _pos("id", "List ID")),
            _cmd(
                "find",
                "Find lists by name within a board",
                _req("board", "Parent board ID"),
                _req("name", "List name to search for"),
            ),
            _cmd(
                "create",
                "Create a new list",
                _req("board", "Parent board ID"),
                _req("name", "List name"),
            ),
            _cmd(
                "update",
                "Update a list",
                _pos("id", "List ID"),
                _opt("name", "New list name"),
                _opt("position", "New position", value_type=float),
            ),
            _cmd(
                "move",
                "Move a list to a new position",
                _pos("id", "List ID"),
                _req("to_position", "Target position", value_type=float),
            ),
            _cmd("delete", "Delete a list", _pos("id", "List ID")),
        ),
    )


def _card() -> CommandSpec:
    return _cmd(
        "card",
        "Manage cards",
        subcommands=(
            _cmd(
                "list",
                "List cards in a list or across a board",
                _opt("list", "Parent list ID", group="scope"),
                _opt("board", "Parent board ID", group="scope"),
                _many("label", _LABEL_FILTER_HELP),
            ),
            _cmd("get", "Get a card by ID", _pos("id", "Card ID")),
            _cmd(
                "get-many",
                "Get multiple cards by exact ID",
                _many(
                    "id",
                    "Exact card ID (repeat for multiple cards)",
                    required=True,
                ),
                _opt(
                    "concurrency",
                    "Max concurrent card fetches",
                    value_type=_concurrency,
                    default=4,
                ),
                _flag(
                    "allow_missing",
                    "Treat missing card IDs as non-fatal and report them in JSON metadata",
                ),
            ),
            _cmd(
                "snapshot",
                "Get the full snapshot (item + included) for a card — JSON only",
                _pos("id", "Card ID"),
            ),
            _cmd(
                "find",
                "Find cards by title and/or label within a scope",
                _opt("list", "Search within a list", group="scope"),
                _opt("board", "Search within a board", group="scope"),
                _opt("project", "Search within a project", group="scope"),
                _opt("title", "Card title to search for"),
                _many("label", _LABEL_FILTER_HELP),
            ),
            _cmd(
                "create",
                "Create a new card",
                _req("list", "Parent list ID"),
                _req("title", "Card title"),
                _opt(
                    "description",
                    'Card description (literal, "-" for stdin, "@file" for file)',
                ),
                _opt("position", 'Position: "top", "bottom", or numeric'),
            ),
            _cmd(
                "update",
                "Update a card",
                _pos("id", "Card ID"),
                _opt("title", "New card title"),
                _opt(
                    "description",
                    'New description (literal, "-" for stdin, "@file" for file)',
                ),
            ),
            _cmd(
                "move",
                "Move a card to a different list (optionally on a different board)",
                _pos("id", "Card ID"),
                _req("to_list", "Target list ID"),
                _opt("to_board", "Target board ID — required when moving across boards"),
                _opt("position", 'Position: "top", "bottom", or numeric'),
            ),
            _cmd("archive", "Archive a card", _pos("id", "Card ID")),
            _cmd("unarchive", "Unarchive a card", _pos("id", "Card ID")),
            _cmd("delete", "Delete a card", _pos("id", "Card ID")),
            _cmd(
                "label",
                "Manage labels on a card",
                subcommands=(
                    _cmd("list", "List labels on a card", _pos("card", "Card ID")),
                    _cmd(
                        "add",
                        "Add a label to a card",
                        _pos("card", "Card ID"),
                        _pos("label", "Label ID"),
                    ),
                    _cmd(
                        "remove",
                        "Remove a label from a card",
                        _pos("card", "Card ID"),
                        _pos("label", "Label ID"),
                    ),
                ),
            ),
            _cmd(
                "assignee",
                "Manage assignees on a card",
                subcommands=(
                    _cmd("list", "List assignees on a card", _pos("card", "Card ID")),
                    _cmd(
                        "add",
                        "Add an assignee to a card",
                        _pos("card", "Card ID"),
                        _pos("user", "User ID"),
                    ),
                    _cmd(
                        "remove",
                        "Remove an assignee from a card",
                        _pos("card", "Card ID"),
                        _pos("user", "User ID"),
                    ),
                ),
            ),
        ),
    )


def _task() -> CommandSpec:
    return _cmd(
        "task",
        "Manage tasks (checklist items on cards)",
        subcommands=(
            _cmd("list", "List tasks on a card", _req("card", "Parent card ID")),
            _cmd(
                "create",
                "Create a new task",
                _req("card", "Parent card ID"),
                _req("title", "Task title"),
            ),
            _cmd(
                "update",
                "Update a task",
                _pos("id", "Task ID"),
                _opt("title", "New task title"),
            ),
            _cmd("complete", "Mark a task as completed", _pos("id", "Task ID")),
            _cmd("reopen", "Reopen a completed task", _pos("id", "Task ID")),
            _cmd("delete", "Delete a task", _pos("id", "Task ID")),
        ),
    )


def _comment() -> CommandSpec:
    return _cmd(
        "comment",
        "Manage comments on cards",
        subcommands=(
            _cmd("list", "List comments on a card", _req("card", "Parent card ID")),
            _cmd(
                "create",
                "Create a new comment",
                _req("card", "Parent card ID"),
                _req(
                    "text",
                    'Comment text (literal, "-" for stdin, "@file" for file)',
                ),
            ),
            _cmd(
                "update",
                "Update a comment",
                _pos("id", "Comment ID"),
                _req(
                    "text",
                    'New comment text (literal, "-" for stdin, "@file" for file)',
                ),
            ),
            _cmd("delete", "Delete a comment", _pos("id", "Comment ID")),
        ),
    )


def _label() -> CommandSpec:
    return _cmd(
        "label",
        "Manage board labels",
        subcommands=(
            _cmd("list", "List labels on a board", _req("board", "Parent board ID")),
            _cmd(
                "find",
                "Find labels by name within a board",
                _req("board", "Parent board ID"),
                _req("name", "Label name to search for"),
            ),
            _cmd(
                "create",
                "Create a new label",
                _req("board", "Parent board ID"),
                _req("name", "Label name"),
                _req(
                    "color",
                    "Label color (e.g., berry-red, pumpkin-orange, rain-blue)",
                ),
            ),
            _cmd(
                "update",
                "Update a label",
                _pos("id", "Label ID"),
                _opt("name", "New label name"),
                _opt("color", "New label color"),
            ),
            _cmd("delete", "Delete a label", _pos("id", "Label ID")),
        ),
    )


def _attachment() -> CommandSpec:
    return _cmd(
        "attachment",
        "Manage attachments on cards",
        subcommands=(
            _cmd(
                "list",
                "List attachments on a card",
                _req("card", "Parent card ID"),
            ),
            _cmd(
                "upload",
                "Upload a file to a card",
                _req("card", "Parent card ID"),
                _pos("file", "File path to upload"),
            ),
            _cmd(
                "download",
                "Download an attachment to a local file",
                _pos("id", "Attachment ID"),
                _req("card", "Parent card ID (used to resolve the real filename)"),
                _opt(
                    "out",
                    "Output file path (defaults to attachment's original filename)",
                ),
            ),
            _cmd("delete", "Delete an attachment", _pos("id", "Attachment ID")),
        ),
    )


def _membership() -> CommandSpec:
    project = _opt("project", "Project ID (mutually exclusive with --board)")
    board = _opt("board", "Board ID (mutually exclusive with --project)")
    return _cmd(
        "membership",
        "Manage project/board memberships",
        subcommands=(
            _cmd("list", "List members of a project or board", project, board),
            _cmd(
                "add",
                "Add a member to a project or board",
                project,
                board,
                _req("user", "User ID to add"),
                _opt("role", "Role (e.g., editor, viewer)"),
            ),
            _cmd(
                "remove",
                "Remove a member from a project or board",
                project,
                board,
                _req("user", "User ID to remove"),
            ),
        ),
    )


def _aliases() -> tuple[CommandSpec, ...]:
    return (
        _cmd(
            "boards",
            "Alias for `board list --project <id>`",
            _req("project", "Parent project ID"),
            hidden=True,
        ),
        _cmd(
            "lists",
            "Alias for `list list --board <id>`",
            _req("board", "Parent board ID"),
            hidden=True,
        ),
        _cmd(
            "cards",
            "Alias for `card list --list <id>` / `card list --board <id>`",
            _opt("list", "Parent list ID", group="scope"),
            _opt("board", "Parent board ID", group="scope"),
            _many("label", _LABEL_FILTER_HELP),
            hidden=True,
        ),
        _cmd(
            "tasks",
            "Alias for `task list --card <id>`",
            _req("card", "Parent card ID"),
            hidden=True,
        ),
        _cmd(
            "comments",
            "Alias for `comment list --card <id>`",
            _req("card", "Parent card ID"),
            hidden=True,
        ),
        _cmd(
            "labels",
            "Alias for `label list --board <id>`",
            _req("board", "Parent board ID"),
            hidden=True,
        ),
    )


@lru_cache(maxsize=1)
def command_tree() -> CommandSpec:
    """Return the full command tree, rooted at the program itself."""
    resources = (
        _cmd(
            "init",
            "Interactive bootstrap — prompts for server/token and writes the config file",
        ),
        _auth(),
        _cmd(
            "user",
            "Manage users",
            subcommands=(
                _cmd("list", "List all users"),
                _cmd("get", "Get a user by ID", _pos("id", "User ID")),
            ),
        ),
        _project(),
        _board(),
        _list(),
        _card(),
        _task(),
        _comment(),
        _label(),
        _attachment(),
        _membership(),
    )
    return CommandSpec(
        name=PROG,
        about="CLI for Planka kanban boards",
        args=_GLOBAL_ARGS,
        subcommands=resources + _aliases(),
        long_about=(
            "Deterministic, scriptable, hierarchy-aware CLI for Planka project "
            "management.\n\nGrammar: plnk <resource> <action> [target] [flags]"
        ),
    )


# ── argparse construction ─────────────────────────────────────────────────


def _count_dest(arg_id: str, depth: int) -> str:
    return f"_{arg_id}_{depth}"


def _add_argument(
    target: Any,
    spec: ArgSpec,
    *,
    suppress_default: bool = False,
    dest: str | None = None,
) -> None:
    if spec.positional:
        target.add_argument(
            spec.id,
            type=spec.value_type,
            metavar=spec.id.upper(),
            help=spec.help,
        )
        return

    names = [f"--{spec.long}"]
    if spec.short:
        names.insert(0, f"-{spec.short}")
    kwargs: dict[str, Any] = {"dest": dest or spec.id, "help": spec.help}

    if spec.kind is ArgKind.FLAG:
        kwargs["action"] = "store_true"
        default: Any = bool(spec.default)
    elif spec.kind is ArgKind.COUNT:
        kwargs["action"] = "count"
        default = spec.default or 0
    elif spec.kind is ArgKind.APPEND:
        kwargs.update(
            action="append",
            type=spec.value_type,
            required=spec.required,
            metavar=spec.id.upper(),
        )
        default = list(spec.default or ())
    else:
        kwargs.update(
            type=spec.value_type,
            required=spec.required,
            metavar=spec.id.upper(),
        )
        default = spec.default

    kwargs["default"] = argparse.SUPPRESS if suppress_default else default
    target.add_argument(*names, **kwargs)


def _configure(
    parser: argparse.ArgumentParser,
    spec: CommandSpec,
    depth: int,
    global_args: Sequence[ArgSpec],
) -> None:
    global_ids = {arg.id for arg in global_args}
    local_ids = {arg.id for arg in spec.args}
    groups: dict[str, Any] = {}

    for arg in spec.args:
        target: Any = parser
        if arg.group:
            if arg.group not in groups:
                groups[arg.group] = parser.add_mutually_exclusive_group()
            target = groups[arg.group]
        # A local option sharing a global's name must not reset the global value.
        _add_argument(target, arg, suppress_default=depth > 0 and arg.id in global_ids)

    if depth > 0:
        for arg in global_args:
            if arg.id in local_ids:
                continue
            dest = _count_dest(arg.id, depth) if arg.kind is ArgKind.COUNT else arg.id
            _add_argument(parser, arg, suppress_default=True, dest=dest)

    if not spec.subcommands:
        return

    visible = [sub.name for sub in spec.subcommands if not sub.hidden]
    subparsers = parser.add_subparsers(
        dest=_SUBCOMMAND_DESTS[min(depth, len(_SUBCOMMAND_DESTS) - 1)],
        metavar="{" + ",".join(visible) + "}",
    )
    subparsers.required = depth > 0
    for sub in spec.subcommands:
        kwargs: dict[str, Any] = {"description": sub.about}
        if not sub.hidden:
            kwargs["help"] = sub.about
        child = subparsers.add_parser(sub.name, **kwargs)
        _configure(child, sub, depth + 1, global_args)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the whole command tree."""
    root = command_tree()
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=root.long_about or root.about,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"{PROG} {VERSION}"
    )
    _configure(parser, root, 0, root.args)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse a command line; global options may appear at any depth."""
    namespace = build_parser().parse_args(argv)
    for spec in command_tree().args:
        if spec.kind is ArgKind.COUNT:
            total = getattr(namespace, spec.id, 0) or 0
            prefix = f"_{spec.id}_"
            for key in [k for k in vars(namespace) if k.startswith(prefix)]:
                total += getattr(namespace, key)
                delattr(namespace, key)
            setattr(namespace, spec.id, total)
        if spec.env and getattr(namespace, spec.id, None) is None:
            setattr(namespace, spec.id, os.environ.get(spec.env) or None)
    return namespace