"""Pytest configuration for repository-relative imports and shared fixtures."""

import os
import sys

import matplotlib
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")


@pytest.fixture
def trees():
    from timber.data_processing import load_trees

    return load_trees()


@pytest.fixture
def classed_trees(trees):
    from timber.data_processing import add_height_class, add_random_group

    return add_random_group(add_height_class(trees), seed=42)
