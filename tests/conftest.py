"""Shared fixtures for bibliography tests."""

import json

import pytest


def item(key, last_names=("Smith",), date="2020", item_type="book", **fields):
    """Build one Better BibTeX export item."""
    entry = {
        "citationKey": key,
        "itemType": item_type,
        "title": fields.pop("title", f"Title of {key}"),
        "creators": [
            {"firstName": "Jane", "lastName": name, "creatorType": "author"}
            for name in last_names
        ],
        "date": date,
    }
    entry.update(fields)
    return entry


@pytest.fixture
def make_item():
    return item


@pytest.fixture
def make_blob():
    """Serialize items into an export blob."""

    def _make_blob(*items):
        return json.dumps({"config": {}, "items": list(items)})

    return _make_blob


@pytest.fixture
def smith_blob(make_blob):
    """A single record: @A -> Smith, 2020."""
    return make_blob(item("A"))
