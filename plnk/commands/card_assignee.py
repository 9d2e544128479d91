"""The ``card assignee`` commands: users assigned to a card."""

from __future__ import annotations

from argparse import Namespace
from typing import Any


def execute(client: Any, args: Namespace, renderer: Any, full: bool = False) -> None:
    """Run a ``card assignee`` action against ``client`` and render the result."""
    action = args.subaction
    if action == "list":
        renderer.render_collection(client.list_assignees(args.card), full)
    elif action == "add":
        renderer.render_item(client.add_assignee(args.card, args.user), full)
    elif action == "remove":
        client.remove_assignee(args.card, args.user)
        renderer.render_message("Assignee removed.")
    else:
        raise ValueError(f"unknown card assignee action: {action!r}")