# plnk

The command grammar, argument parser and machine-readable help for a
scriptable command line over Planka-style kanban boards, together with
handlers for the `user`, `card label` and `card assignee` actions.

The grammar is always:

    plnk <resource> <action> [target] [flags]

The resources in the tree are `init`, `auth`, `user`, `project`, `board`,
`list`, `card`, `task`, `comment`, `label`, `attachment` and `membership`.
`card` also carries the nested groups `card label` and `card assignee`.
The plural aliases `boards`, `lists`, `cards`, `tasks`, `comments` and
`labels` are accepted but hidden from help listings.

## Modules

| Module | Purpose |
| --- | --- |
| `plnk.app` | `command_tree()` returns the whole tree as `CommandSpec` / `ArgSpec` values; `build_parser()` builds an `argparse` parser from it; `parse_args(argv)` parses a command line. `OutputFormat` is `table`, `json` or `markdown`. |
| `plnk.help` | `build_help(root, positionals)` returns a `CommandHelp`; `to_dict()` gives resource, action, summary, args, options (sorted) and examples. Also `try_machine_help(argv)`, `extract_positionals(raw_args)`, `infer_type(name)` and `get_examples(resource, action)`. |
| `plnk.commands.user` | `execute(client, args, renderer, full)` for `user list` and `user get`. |
| `plnk.commands.card_label` | `execute(client, args, renderer, full)` for `card label list/add/remove`. |
| `plnk.commands.card_assignee` | `execute(client, args, renderer, full)` for `card assignee list/add/remove`. |

## Parsing a command line

```python
from plnk.app import parse_args

args = parse_args(["card", "list", "--board", "456", "--label", "urgent"])
args.command, args.action, args.board, args.label
# ('card', 'list', '456', ['urgent'])
```

Global options (`--server`, `--token`, `--output`, `-v/--verbose`,
`--quiet`, `--no-color`, `--yes`, `--full`, `--http-max-in-flight`,
`--http-rate-limit`, `--http-burst`, `--retry-attempts`,
`--retry-base-delay-ms`, `--retry-max-delay-ms`, `--no-retry`) are accepted
before or after the subcommands. `--server` and `--token` fall back to the
`PLANKA_SERVER` and `PLANKA_TOKEN` environment variables. `--verbose`
counts are summed across every position it appears in. `card get-many
--concurrency` must lie between 1 and 16 (default 4).

## Machine-readable help

```python
from plnk.app import command_tree
from plnk.help import build_help

data = build_help(command_tree(), ["card", "create"]).to_dict()
assert data["options"]["--list"]["required"]
print(data["examples"])
```

No positionals lists the resources; one lists that resource's actions;
two or more describe an action, with its own arguments, the global options
and any nested subcommands. `try_machine_help(argv)` prints this as JSON and
returns `True` when `argv` (including the program name) holds both
`--help`/`-h` and `--output json`; otherwise it prints nothing and returns
`False`.

## Command handlers

Each `execute` reads the chosen action from the parsed arguments (`action`
for `user`, `subaction` for the card groups), calls the matching method on
`client` and passes the result to `renderer`:

- `renderer.render_collection(items, full)`
- `renderer.render_item(item, full)`
- `renderer.render_message(text)`

Client methods used: `list_users`, `get_user`, `list_card_labels`,
`add_card_label`, `remove_card_label`, `list_assignees`, `add_assignee`,
`remove_assignee`. An unknown action raises `ValueError`.

## What this package does not do

- It has no HTTP client for a Planka server, and no renderer; both are
  supplied by the caller.
- There are no handlers for `project`, `board`, `list`, `card` (other than
  its `label` and `assignee` groups), `task`, `comment`, `label`,
  `attachment`, `membership`, `auth` or `init`: they parse, but nothing
  runs them.
- There is no installed `plnk` command and no dispatcher from parsed
  arguments to handlers.
- The `-`/`@file` text input convention named in option help is not
  resolved here, and no delete confirmation prompts exist.