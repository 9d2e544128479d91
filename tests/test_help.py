import json

import pytest

from plnk.app import command_tree
from plnk.help import (
    ArgHelp,
    CommandHelp,
    OptionHelp,
    build_help,
    extract_positionals,
    get_examples,
    infer_type,
    try_machine_help,
)


def test_extract_positionals_basic():
    args = ["plnk", "card", "create", "--help", "--output", "json"]
    assert extract_positionals(args) == ["card", "create"]


def test_extract_positionals_with_value_flags():
    args = [
        "plnk",
        "--server",
        "http://example.com",
        "board",
        "list",
        "--output",
        "json",
        "--help",
    ]
    assert extract_positionals(args) == ["board", "list"]


def test_extract_positionals_with_positional_id():
    args = ["plnk", "card", "get", "1234", "--help", "--output", "json"]
    assert extract_positionals(args) == ["card", "get", "1234"]


def test_extract_positionals_skips_non_value_flags_only():
    args = ["plnk", "-v", "--quiet", "task", "--retry-attempts", "3", "list"]
    assert extract_positionals(args) == ["task", "list"]


def test_build_help_card_create():
    help_doc = build_help(command_tree(), ["card", "create"])
    assert help_doc.resource == "card"
    assert help_doc.action == "create"
    assert help_doc.summary != ""
    assert "--list" in help_doc.options
    assert "--title" in help_doc.options
    assert help_doc.options["--list"].required
    assert help_doc.options["--title"].required
    assert help_doc.examples


def test_build_help_resource_level():
    help_doc = build_help(command_tree(), ["card"])
    assert help_doc.resource == "card"
    assert help_doc.action == ""
    assert "list" in help_doc.options
    assert "get" in help_doc.options
    assert "create" in help_doc.options
    assert help_doc.options["get"].opt_type == "action"


def test_build_help_top_level():
    help_doc = build_help(command_tree(), [])
    assert help_doc.resource == ""
    assert "card" in help_doc.options
    assert "project" in help_doc.options
    assert "boards" not in help_doc.options
    assert "cards" not in help_doc.options
    assert help_doc.summary == "CLI for Planka kanban boards"


def test_build_help_unknown_word_falls_back_to_top_level():
    help_doc = build_help(command_tree(), ["bogus", "card"])
    assert help_doc.resource == ""
    assert help_doc.options["card"].opt_type == "resource"


def test_build_help_nested_subcommand():
    help_doc = build_help(command_tree(), ["card", "label", "add"])
    assert help_doc.resource == "card"
    assert help_doc.action == "label add"
    assert [arg.name for arg in help_doc.args] == ["card", "label"]
    assert help_doc.examples == ["plnk card label add 1234 111"]


def test_build_help_action_with_subcommands_lists_them():
    help_doc = build_help(command_tree(), ["auth", "token"])
    assert help_doc.options["set"].opt_type == "subcommand"


def test_positional_args_and_extra_values():
    help_doc = build_help(command_tree(), ["card", "get", "1234"])
    assert help_doc.action == "get"
    assert len(help_doc.args) == 1
    assert help_doc.args[0].name == "id"
    assert help_doc.args[0].required is True
    assert help_doc.args[0].arg_type == "string"


def test_option_types_inferred():
    assert infer_type("description") == "text"
    assert infer_type("text") == "text"
    assert infer_type("position") == "enum(top|bottom|int)"
    assert infer_type("title") == "string"
    assert infer_type("file") == "path"
    assert infer_type("http_max_in_flight") == "integer"
    assert infer_type("no_retry") == "flag"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("role", "enum(admin|editor|viewer)"),
        ("out", "path"),
        ("concurrency", "integer"),
        ("verbose", "flag"),
        ("allow_missing", "flag"),
    ],
)
def test_more_types_inferred(name, expected):
    assert infer_type(name) == expected


def test_global_flags_included():
    help_doc = build_help(command_tree(), ["card", "create"])
    for flag in (
        "--server",
        "--token",
        "--output",
        "--verbose",
        "--quiet",
        "--http-max-in-flight",
        "--retry-attempts",
    ):
        assert flag in help_doc.options
    assert help_doc.options["--retry-attempts"].opt_type == "integer"


def test_hyphenated_option_names():
    help_doc = build_help(command_tree(), ["card", "move"])
    assert "--to-list" in help_doc.options
    assert help_doc.options["--to-list"].required
    assert help_doc.options["--position"].opt_type == "enum(top|bottom|int)"


def test_get_examples_known_and_unknown():
    assert get_examples("task", "complete") == ["plnk task complete 5678"]
    assert len(get_examples("card", "find")) == 5
    assert get_examples("nothing", "here") == []


def test_to_dict_shape():
    help_doc = CommandHelp(
        resource="r",
        action="a",
        summary="s",
        args=[ArgHelp("id", "string", True, "ID")],
        options={
            "--z": OptionHelp("string", False, "z"),
            "--a": OptionHelp("flag", False, "a"),
        },
        examples=["ex"],
    )
    data = help_doc.to_dict()
    assert list(data) == ["resource", "action", "summary", "args", "options", "examples"]
    assert data["args"] == [
        {"name": "id", "type": "string", "required": True, "description": "ID"}
    ]
    assert list(data["options"]) == ["--a", "--z"]
    assert data["options"]["--a"] == {"type": "flag", "required": False, "description": "a"}


def test_try_machine_help_prints_json(capsys):
    assert try_machine_help(["plnk", "card", "create", "--help", "--output", "json"])
    data = json.loads(capsys.readouterr().out)
    assert data["resource"] == "card"
    assert data["action"] == "create"
    assert data["options"]["--list"]["required"] is True


def test_try_machine_help_requires_both_flags(capsys):
    assert try_machine_help(["plnk", "card", "--help"]) is False
    assert try_machine_help(["plnk", "card", "--output", "json"]) is False
    assert try_machine_help(["plnk", "card", "-h", "--output", "table"]) is False
    assert capsys.readouterr().out == ""