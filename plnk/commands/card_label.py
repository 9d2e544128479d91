"""The ``card label`` commands: labels attached to a card."""

from __future__ import annotations

from argparse import Namespace
from typing import Any


def execute(client: Any, args: Namespace, renderer: Any, full: bool = False) -> None:
    """Run a ``card label`` action against ``client`` and render the result."""
    action = args.subaction
    if action == "list":
        renderer.render_collection(client.list_card_labels(args.card), full)
    elif action == "add":
        renderer.render_item(client.add_card_label(args.card, args.label), full)
    elif action == "remove":
        client.remove_card_label(args.card, args.label)
        renderer.render_message("Card label removed.")
    else:
        raise ValueError(f"unknown card label action: {action!r}")