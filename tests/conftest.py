from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.code_tree import CodeTreeBuilder


@pytest.fixture
def code_tree(tmp_path: Path) -> CodeTreeBuilder:
    """Provide a scratch code tree rooted at the pytest tmp_path."""
    return CodeTreeBuilder(tmp_path)
