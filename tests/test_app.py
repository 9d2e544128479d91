import pytest

from plnk.app import (
    ArgSpec,
    CommandSpec,
    OutputFormat,
    build_parser,
    command_tree,
    parse_args,
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv("PLANKA_SERVER", raising=False)
    monkeypatch.delenv("PLANKA_TOKEN", raising=False)


def _walk(spec):
    yield spec
    for sub in spec.subcommands:
        yield from _walk(sub)


def test_no_command_gives_defaults():
    args = parse_args([])
    assert args.command is None
    assert args.output is OutputFormat.TABLE
    assert args.verbose == 0
    assert args.yes is False


def test_card_create_options():
    args = parse_args(
        ["card", "create", "--list", "789", "--title", "Fix auth", "--position", "top"]
    )
    assert (args.command, args.action) == ("card", "create")
    assert args.list == "789"
    assert args.title == "Fix auth"
    assert args.position == "top"
    assert args.description is None


def test_global_option_after_subcommand():
    args = parse_args(["board", "list", "--project", "123", "--output", "json"])
    assert args.output is OutputFormat.JSON
    assert args.project == "123"


def test_global_option_before_subcommand_survives():
    args = parse_args(["--output", "markdown", "--yes", "project", "list"])
    assert args.output is OutputFormat.MARKDOWN
    assert args.yes is True


def test_verbose_counts_across_levels():
    args = parse_args(["-v", "project", "list", "-vv"])
    assert args.verbose == 3


def test_invalid_output_rejected():
    with pytest.raises(SystemExit):
        parse_args(["--output", "yaml", "project", "list"])


def test_missing_required_option():
    with pytest.raises(SystemExit):
        parse_args(["card", "create", "--list", "789"])


def test_resource_requires_action():
    with pytest.raises(SystemExit):
        parse_args(["card"])


def test_card_list_scope_is_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["card", "list", "--list", "789", "--board", "456"])


def test_label_filter_repeats():
    args = parse_args(["card", "list", "--board", "456", "--label", "urgent", "--label", "111"])
    assert args.label == ["urgent", "111"]
    assert parse_args(["card", "list", "--board", "456"]).label == []


def test_get_many_defaults_and_bounds():
    args = parse_args(["card", "get-many", "--id", "123", "--id", "456"])
    assert args.id == ["123", "456"]
    assert args.concurrency == 4
    assert args.allow_missing is False
    assert parse_args(["card", "get-many", "--id", "123", "--concurrency", "16"]).concurrency == 16
    for bad in ("0", "17", "x"):
        with pytest.raises(SystemExit):
            parse_args(["card", "get-many", "--id", "123", "--concurrency", bad])


def test_get_many_requires_id():
    with pytest.raises(SystemExit):
        parse_args(["card", "get-many"])


def test_list_move_position_is_float():
    args = parse_args(["list", "move", "789", "--to-position", "2"])
    assert args.id == "789"
    assert args.to_position == 2.0


def test_nested_card_label_add():
    args = parse_args(["card", "label", "add", "1234", "111"])
    assert (args.command, args.action, args.subaction) == ("card", "label", "add")
    assert (args.card, args.label) == ("1234", "111")


def test_auth_token_set_positional():
    args = parse_args(["auth", "token", "set", "token"])
    assert args.subaction == "set"
    assert args.token == "token"


def test_login_server_keeps_root_value():
    root = parse_args(["--server", "https://a.example.com", "auth", "login"])
    assert root.server == "https://a.example.com"
    local = parse_args(["auth", "login", "--server", "https://b.example.com"])
    assert local.server == "https://b.example.com"


def test_env_fallback_and_flag_precedence(monkeypatch):
    monkeypatch.setenv("PLANKA_SERVER", "https://env.example.com")
    monkeypatch.setenv("PLANKA_TOKEN", "token")
    args = parse_args(["project", "list"])
    assert args.server == "https://env.example.com"
    assert args.token == "token"
    flagged = parse_args(["project", "list", "--server", "https://flag.example.com"])
    assert flagged.server == "https://flag.example.com"


def test_integer_globals_validated():
    assert parse_args(["--http-max-in-flight", "8", "user", "list"]).http_max_in_flight == 8
    with pytest.raises(SystemExit):
        parse_args(["--retry-attempts", "-1", "user", "list"])


def test_hidden_alias_parses():
    args = parse_args(["cards", "--board", "456", "--label", "urgent"])
    assert args.command == "cards"
    assert args.board == "456"
    assert args.label == ["urgent"]


def test_version_flag(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--version"])
    assert "0.2.0" in capsys.readouterr().out


def test_find_subcommand():
    root = command_tree()
    assert root.find_subcommand("project").about == "Manage projects"
    assert root.find_subcommand("nope") is None
    assert root.find_subcommand("cards").hidden is True
    assert root.find_subcommand("card").hidden is False


def test_tree_required_flags():
    create = command_tree().find_subcommand("card").find_subcommand("create")
    required = {arg.id: arg.required for arg in create.args}
    assert required["list"] is True
    assert required["title"] is True
    assert required["description"] is False


def test_argspec_long_derived_from_id():
    assert ArgSpec("to_position").long == "to-position"
    assert ArgSpec("file", positional=True).long is None


def test_global_args_marked_global():
    root = command_tree()
    assert all(arg.is_global for arg in root.args)
    longs = {arg.long for arg in root.args}
    assert {"server", "token", "output", "http-max-in-flight", "retry-attempts"} <= longs


def test_subcommand_names_unique_per_level():
    for spec in _walk(command_tree()):
        names = [sub.name for sub in spec.subcommands]
        assert len(names) == len(set(names))


def test_every_leaf_parses_as_command_spec():
    leaves = [s for s in _walk(command_tree()) if not s.subcommands]
    assert all(isinstance(leaf, CommandSpec) for leaf in leaves)
    assert any(leaf.name == "get-many" for leaf in leaves)