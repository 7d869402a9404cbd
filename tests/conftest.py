"""Shared fixtures: a headless Qt core application and isolated settings."""
from __future__ import annotations

import os
import sys

import pytest
from PyQt6.QtCore import QCoreApplication

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from settings import SettingsManager, set_settings


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QCoreApplication for the entire test session."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path):
    """Point the global settings at an empty temp directory for each test."""
    sm = SettingsManager(settings_dir=tmp_path / "config")
    set_settings(sm)
    yield sm
    set_settings(None)
