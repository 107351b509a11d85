"""Shared pytest fixtures for spemath tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from spemath.core.expression_lang.evaluator import Evaluator


@pytest.fixture
def evaluator() -> Evaluator:
    """Return an evaluator with a fresh environment."""
    return Evaluator()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a project directory with a manifest and a default program."""
    (tmp_path / "spemath.toml").write_text(
        """
[run]
source = "input.spemath"
max_call_depth = 50
"""
    )
    (tmp_path / "input.spemath").write_text("x = 4\n2x + 1\n")
    return tmp_path
