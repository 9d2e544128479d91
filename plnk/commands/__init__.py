"""Handlers for the user, card label and card assignee actions."""