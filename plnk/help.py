"""Machine-readable help, emitted as JSON when both ``--help`` and ``--output json`` are given."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from plnk.app import CommandSpec, command_tree

# Global options that consume the following command-line word as their value.
_VALUE_FLAGS = frozenset(
    {
        "--server",
        "--token",
        "--output",
        "--http-max-in-flight",
        "--http-rate-limit",
        "--http-burst",
        "--retry-attempts",
        "--retry-base-delay-ms",
        "--retry-max-delay-ms",
    }
)

_SKIPPED_ARGS = frozenset({"help", "version"})

_INTEGER_ARGS = frozenset(
    {
        "concurrency",
        "http_max_in_flight",
        "http_rate_limit",
        "http_burst",
        "retry_attempts",
        "retry_base_delay_ms",
        "retry_max_delay_ms",
    }
)

_FLAG_ARGS = frozenset(
    {"allow_missing", "no_retry", "quiet", "yes", "full", "no_color", "verbose"}
)


@dataclass
class ArgHelp:
    """A positional argument of an action."""

    name: str
    arg_type: str
    required: bool
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.arg_type,
            "required": self.required,
            "description": self.description,
        }


@dataclass
class OptionHelp:
    """An option, resource, action or subcommand entry."""

    opt_type: str
    required: bool
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.opt_type,
            "required": self.required,
            "description": self.description,
        }


@dataclass
class CommandHelp:
    """Help for one level of the command tree."""

    resource: str = ""
    action: str = ""
    summary: str = ""
    args: list[ArgHelp] = field(default_factory=list)
    options: dict[str, OptionHelp] = field(default_factory=dict)
    examples: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping, options sorted by name."""
        return {
            "resource": self.resource,
            "action": self.action,
            "summary": self.summary,
            "args": [arg.to_dict() for arg in self.args],
            "options": {
                name: self.options[name].to_dict() for name in sorted(self.options)
            },
            "examples": list(self.examples),
        }


def try_machine_help(argv: Sequence[str] | None = None) -> bool:
    """Print JSON help if ``argv`` asks for help with JSON output.

    ``argv`` includes the program name, as ``sys.argv`` does. Returns whether
    help was printed.
    """
    raw_args = list(sys.argv if argv is None else argv)

    has_help = any(arg in ("--help", "-h") for arg in raw_args)
    has_json_output = any(
        first == "--output" and second == "json"
        for first, second in zip(raw_args, raw_args[1:])
    )
    if not has_help or not has_json_output:
        return False

    help_doc = build_help(command_tree(), extract_positionals(raw_args))
    print(json.dumps(help_doc.to_dict(), indent=2, ensure_ascii=False))
    return True


def extract_positionals(raw_args: Sequence[str]) -> list[str]:
    """Return the positional words of a command line, skipping flags and their values."""
    positionals: list[str] = []
    words = iter(raw_args[1:])
    for word in words:
        if word.startswith("-"):
            if word in _VALUE_FLAGS:
                next(words, None)
            continue
        positionals.append(word)
    return positionals


def build_help(root: CommandSpec, positionals: Sequence[str]) -> CommandHelp:
    """Walk the command tree along ``positionals`` and describe where it stops."""
    current = root
    path: list[str] = []
    for word in positionals:
        sub = current.find_subcommand(word)
        if sub is None:
            # Remaining words are argument values, not subcommands.
            break
        path.append(word)
        current = sub

    if not path:
        return _top_level_help(root)
    if len(path) == 1:
        return _resource_help(path[0], current)
    return _action_help(path, current)


def _listed_subcommands(
    cmd: CommandSpec, kind: str
) -> Iterable[tuple[str, OptionHelp]]:
    for sub in cmd.subcommands:
        if sub.hidden or sub.name == "help":
            continue
        yield sub.name, OptionHelp(opt_type=kind, required=False, description=sub.about)


def _top_level_help(cmd: CommandSpec) -> CommandHelp:
    return CommandHelp(
        summary=cmd.about,
        options=dict(_listed_subcommands(cmd, "resource")),
    )


def _resource_help(resource: str, cmd: CommandSpec) -> CommandHelp:
    return CommandHelp(
        resource=resource,
        summary=cmd.about,
        options=dict(_listed_subcommands(cmd, "action")),
    )


def _action_help(path: Sequence[str], cmd: CommandSpec) -> CommandHelp:
    resource = path[0]
    action = " ".join(path[1:])
    args: list[ArgHelp] = []
    options: dict[str, OptionHelp] = {}

    for arg in cmd.args:
        if arg.id in _SKIPPED_ARGS:
            continue
        arg_type = infer_type(arg.id)
        if arg.positional:
            args.append(ArgHelp(arg.id, arg_type, arg.required, arg.help))
        else:
            options[f"--{arg.long or arg.id}"] = OptionHelp(
                arg_type, arg.required, arg.help
            )

    for arg in command_tree().args:
        if arg.id in _SKIPPED_ARGS:
            continue
        options.setdefault(
            f"--{arg.long or arg.id}",
            OptionHelp(infer_type(arg.id), arg.required, arg.help),
        )

    options.update(_listed_subcommands(cmd, "subcommand"))

    return CommandHelp(
        resource=resource,
        action=action,
        summary=cmd.about,
        args=args,
        options=options,
        examples=get_examples(resource, action),
    )


def infer_type(name: str) -> str:
    """Return the user-facing type of an argument, judged by its name."""
    if name in ("description", "text"):
        return "text"
    if name == "position":
        return "enum(top|bottom|int)"
    if name == "role":
        return "enum(admin|editor|viewer)"
    if name in ("file", "out"):
        return "path"
    if name in _INTEGER_ARGS:
        return "integer"
    if name in _FLAG_ARGS:
        return "flag"
    return "string"


_EXAMPLES: dict[tuple[str, str], tuple[str, ...]] = {
    # Auth
    ("auth", "login"): (
        "plnk auth login --server https://planka.example.com",
        "plnk auth login --server https://planka.example.com --email user@example.com --password secret",
    ),
    ("auth", "whoami"): ("plnk auth whoami",),
    ("auth", "status"): ("plnk auth status",),
    ("auth", "logout"): ("plnk auth logout",),
    # Project
    ("project", "list"): ("plnk project list",),
    ("project", "get"): ("plnk project get 123",),
    ("project", "create"): ("plnk project create --name 'Platform'",),
    ("project", "find"): ("plnk project find --name 'Platform'",),
    ("project", "snapshot"): ("plnk project snapshot 123 --output json",),
    ("project", "update"): ("plnk project update 123 --name 'Platform Core'",),
    ("project", "delete"): ("plnk project delete 123",),
    # User
    ("user", "list"): ("plnk user list",),
    ("user", "get"): ("plnk user get 88",),
    # Board
    ("board", "list"): ("plnk board list --project 123",),
    ("board", "get"): ("plnk board get 456",),
    ("board", "find"): ("plnk board find --project 123 --name 'Sprint'",),
    ("board", "snapshot"): ("plnk board snapshot 456 --output json",),
    ("board", "create"): ("plnk board create --project 123 --name 'Sprint'",),
    ("board", "update"): ("plnk board update 456 --name 'Sprint 2'",),
    ("board", "delete"): ("plnk board delete 456",),
    # List
    ("list", "list"): ("plnk list list --board 456",),
    ("list", "get"): ("plnk list get 789",),
    ("list", "find"): ("plnk list find --board 456 --name 'Backlog'",),
    ("list", "create"): ("plnk list create --board 456 --name 'Doing'",),
    ("list", "move"): ("plnk list move 789 --to-position 2",),
    ("list", "delete"): ("plnk list delete 789",),
    # Card
    ("card", "list"): (
        "plnk card list --list 789",
        "plnk card list --board 456 --label urgent",
        "plnk card list --board 456 --label 111",
    ),
    ("card", "get"): ("plnk card get 1234",),
    ("card", "get-many"): (
        "plnk card get-many --id 123 --id 456",
        "plnk card get-many --id 123 --id 456 --output json",
        "plnk card get-many --id 123 --id 999 --allow-missing --output json",
        "plnk card get-many --id 123 --id 456 --concurrency 1",
    ),
    ("card", "snapshot"): ("plnk card snapshot 1234 --output json",),
    ("card", "find"): (
        "plnk card find --list 789 --title 'Fix auth'",
        "plnk card find --board 456 --title 'Fix auth'",
        "plnk card find --board 456 --label urgent",
        "plnk card find --board 456 --label 111 --title 'Fix auth'",
        "plnk card find --project 123 --title 'Fix auth'",
    ),
    ("card", "create"): (
        "plnk card create --list 789 --title 'Fix auth'",
        "plnk card create --list 789 --title 'Fix auth' --description @spec.md",
        "plnk card create --list 789 --title 'Fix auth' --position top",
    ),
    ("card", "update"): (
        "plnk card update 1234 --title 'Fix auth race'",
        "plnk card update 1234 --description @spec.md",
    ),
    ("card", "move"): ("plnk card move 1234 --to-list 790 --position top",),
    ("card", "archive"): ("plnk card archive 1234",),
    ("card", "unarchive"): ("plnk card unarchive 1234",),
    ("card", "delete"): ("plnk card delete 1234",),
    # Card label
    ("card", "label list"): ("plnk card label list 1234",),
    ("card", "label add"): ("plnk card label add 1234 111",),
    ("card", "label remove"): ("plnk card label remove 1234 111",),
    # Card assignee
    ("card", "assignee list"): ("plnk card assignee list 1234",),
    ("card", "assignee add"): ("plnk card assignee add 1234 88",),
    ("card", "assignee remove"): ("plnk card assignee remove 1234 88",),
    # Task
    ("task", "list"): ("plnk task list --card 1234",),
    ("task", "create"): ("plnk task create --card 1234 --title 'Write tests'",),
    ("task", "complete"): ("plnk task complete 5678",),
    ("task", "reopen"): ("plnk task reopen 5678",),
    ("task", "delete"): ("plnk task delete 5678",),
    # Comment
    ("comment", "list"): ("plnk comment list --card 1234",),
    ("comment", "create"): (
        "plnk comment create --card 1234 --text 'Starting work'",
        "plnk comment create --card 1234 --text @note.txt",
    ),
    ("comment", "update"): ("plnk comment update 9012 --text 'Blocked on API'",),
    ("comment", "delete"): ("plnk comment delete 9012",),
    # Label
    ("label", "list"): ("plnk label list --board 456",),
    ("label", "find"): ("plnk label find --board 456 --name 'urgent'",),
    ("label", "create"): (
        "plnk label create --board 456 --name 'urgent' --color berry-red",
    ),
    ("label", "update"): (
        "plnk label update 111 --name 'blocked' --color sunset-orange",
    ),
    ("label", "delete"): ("plnk label delete 111",),
    # Attachment
    ("attachment", "list"): ("plnk attachment list --card 1234",),
    ("attachment", "upload"): ("plnk attachment upload --card 1234 ./spec.png",),
    ("attachment", "download"): (
        "plnk attachment download 555 --card 1234",
        "plnk attachment download 555 --card 1234 --out ./renamed.png",
    ),
    ("attachment", "delete"): ("plnk attachment delete 555",),
    # Membership
    ("membership", "list"): (
        "plnk membership list --project 123",
        "plnk membership list --board 456",
    ),
    ("membership", "add"): (
        "plnk membership add --project 123 --user 88 --role editor",
    ),
    ("membership", "remove"): ("plnk membership remove --board 456 --user 88",),
}


def get_examples(resource: str, action: str) -> list[str]:
    """Return example invocations for a resource action, or an empty list."""
    return list(_EXAMPLES.get((resource, action), ()))