# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from statedispatch import DispatchMachine, create_dispatch


@pytest.fixture
def counter_events():
    """Return-style events operating on {"count": int}."""
    return {
        "increment": lambda state: {"count": state["count"] + 1},
        "decrement": lambda state: {"count": state["count"] - 1},
        "add": lambda state, payload: {"count": state["count"] + payload["value"]},
    }


@pytest.fixture
def counter(counter_events):
    """A counter machine where every event may follow every other."""
    return create_dispatch(
        initial_state={"count": 0},
        events=counter_events,
        valid_next_events={"increment": [], "decrement": [], "add": []},
    )


@pytest.fixture
def todos():
    """A draft-style todo machine."""

    def add_item(draft, item):
        draft["items"].append(item)

    def remove_item(draft, payload):
        draft["items"] = [i for i in draft["items"] if i["id"] != payload["id"]]

    return DispatchMachine(
        initial_state={"items": []},
        events={"add_item": add_item, "remove_item": remove_item},
        valid_next_events={
            "add_item": ["add_item", "remove_item"],
            "remove_item": ["add_item", "remove_item"],
        },
    )


@pytest.fixture
def listener():
    """A listener mock recording the states it receives."""
    return MagicMock()


@pytest.fixture
def passing_schema():
    """A schema stub whose safe_parse always succeeds."""
    schema = MagicMock()
    schema.safe_parse.side_effect = lambda value: {"success": True, "data": value}
    return schema


@pytest.fixture
def failing_schema():
    """A schema stub whose safe_parse always fails."""
    schema = MagicMock()
    schema.safe_parse.return_value = {"success": False, "error": {"message": "count must be >= 0"}}
    return schema
