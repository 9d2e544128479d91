"""Command grammar, parser, machine-readable help and user/card label/card assignee handlers for a Planka kanban command line."""

__version__ = "0.2.0"