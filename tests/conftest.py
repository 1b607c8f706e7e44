import json
from pathlib import Path

import pytest

CONFIG_TEXT = """{
  "metadata": {
    "fileName": "config.json"
  },
  "data": {
    "app": {
      "name": "My Application",
      "version": "1.0.0"
    }
  }
}
"""

EXPORT_TEXT = """{
  "metadata": {
    "source": "export",
    "recordCount": 100
  },
  "settings": {
    "timeout": 5000,
    "retries": 3
  }
}
"""

STORE = {
    "store": {
        "book": [
            {"title": "Sayings of the Century", "price": 8.95, "status": "completed"},
            {"title": "Sword of Honour", "price": 12.99, "status": "pending"},
            {"title": "Moby Dick", "price": 22.5, "status": "completed"},
        ]
    }
}


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def config_text() -> str:
    return CONFIG_TEXT


@pytest.fixture
def export_text() -> str:
    return EXPORT_TEXT


@pytest.fixture
def json_tree(tmp_path: Path) -> Path:
    """A small tree of JSON files plus files the search must skip or ignore.

    root/
        a.json            {"name": "alpha"}
        broken.json       not JSON
        notes.txt         ignored, not .json
        sub/b.json        {"name": "beta"}
        sub/deep/c.JSON   {"name": "gamma"}
    """
    root = tmp_path / "root"
    write_json(root / "a.json", {"name": "alpha", "tags": ["x", "y"]})
    (root / "broken.json").write_text('{"name": "oops",', encoding="utf-8")
    (root / "notes.txt").write_text('{"name": "not searched"}', encoding="utf-8")
    write_json(root / "sub" / "b.json", {"name": "beta"})
    write_json(root / "sub" / "deep" / "c.JSON", {"name": "gamma"})
    return root


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    return write_json(tmp_path / "store.json", STORE)
