"""Test configuration for the cadastros panel.

Forces the offscreen Qt platform, keeps the project root importable without
an editable install and provides a session-wide QApplication plus temporary
settings/database fixtures.
"""
import json
import os
import pathlib
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

ROOT = pathlib.Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from PyQt5.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    data = {
        "db_path": str(tmp_path / "db" / "painel.db"),
        "log_dir": str(tmp_path / "logs"),
        "card_breakpoint": 900,
        "confirm_timeout_ms": 3000,
        "toast_timeout_ms": 4000,
    }
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def settings(settings_file):
    return json.loads(settings_file.read_text(encoding="utf-8"))


@pytest.fixture
def db_path(settings):
    from database.db import create_tables

    create_tables(settings["db_path"])
    return settings["db_path"]
