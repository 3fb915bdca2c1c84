"""Shared fixtures for save subsystem tests."""

import pytest

from saves.store import SlotStore


@pytest.fixture
def save_dir(tmp_path):
    return tmp_path / "SaveFiles"


@pytest.fixture
def store(save_dir):
    return SlotStore(save_dir)
