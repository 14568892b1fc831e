"""Shared fixtures for the chmread tests."""

import os
import shutil

import pytest

SAMPLE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "sample")


@pytest.fixture
def sample_dir():
    """The read-only sample tree, as unpacked from a CHM file."""
    return SAMPLE_DIR


@pytest.fixture
def sample_copy(tmp_path):
    """A writable copy of the sample tree, for tests that convert files."""
    target = tmp_path / "sample"
    shutil.copytree(SAMPLE_DIR, target)
    return str(target)
