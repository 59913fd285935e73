"""Shared fixtures for the entrytree test-suite."""

from __future__ import annotations

import pytest

from ids import IdGenerator


@pytest.fixture()
def ids() -> IdGenerator:
    return IdGenerator()
