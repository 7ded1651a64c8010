import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path before importing project modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


@pytest.fixture
def frames_dir(tmp_path):
    path = tmp_path / "frames"
    path.mkdir()
    return path
