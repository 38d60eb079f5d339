from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture  # type: ignore[misc]
def ember_file(tmp_path: Path) -> Callable[[str], Path]:
    """Writes source text to a temporary `.ember` file and returns its path."""

    def write(source: str, name: str = "input.ember") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return write
