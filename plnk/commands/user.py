"""The ``user`` resource commands."""

from __future__ import annotations

from argparse import Namespace
from typing import Any


def execute(client: Any, args: Namespace, renderer: Any, full: bool = False) -> None:
    """Run a ``user`` action against ``client`` and render the result."""
    action = args.action
    if action == "list":
        renderer.render_collection(client.list_users(), full)
    elif action == "get":
        renderer.render_item(client.get_user(args.id), full)
    else:
        raise ValueError(f"unknown user action: {action!r}")