"""Pytest fixtures for paren-tools tests."""

import pytest
from pathlib import Path

# Small netlist-style document exercising every literal kind
SAMPLE_DOCUMENT = """(netlist
  (version 3)
  (generator "paren-tools \\"test\\"")
  ; components
  (component (ref R1) (value "10k") (tolerance 0.05) (fitted #t))
  (component (ref C3) (value "100nF") (tolerance #nan) (fitted #f))
  (net (code -1) (name |GND plane|) (limit #+inf) (floor #-inf)
    (node R1 2) (node C3 1))
  ()
)
"""


@pytest.fixture
def sample_document() -> str:
    """Text of a small document using every literal kind."""
    return SAMPLE_DOCUMENT


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Create a sample document file for testing."""
    path = tmp_path / "sample.sexp"
    path.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch) -> Path:
    """Project directory with no user config and a .git marker to stop discovery."""
    (tmp_path / ".git").mkdir()
    monkeypatch.setattr("paren_tools.config.USER_CONFIG_PATH", tmp_path / "no-exist.toml")
    return tmp_path
