"""
Pytest configuration and fixtures for spritedex tests.
"""

import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src directory to Python path to allow importing spritedex
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from spritedex.models import FormRecord  # noqa: E402
from spritedex.naming import NameResolver, NamingRules  # noqa: E402


@pytest.fixture(scope="session")
def rules() -> NamingRules:
    """Naming rules shipped with the package."""
    return NamingRules.load()


@pytest.fixture
def resolver(rules: NamingRules) -> NameResolver:
    return NameResolver(rules)


@pytest.fixture
def make_forms():
    """Factory building form records the way the key extractor names them."""

    def _make(creature_id: int, keys: list[str]) -> list[FormRecord]:
        return [
            FormRecord(filename=f"{creature_id:04d}{key}.png", key=key, creature_id=creature_id)
            for key in keys
        ]

    return _make


SHEET_COLORS = [(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255), (255, 255, 0, 255)]


@pytest.fixture
def make_sheet():
    """Factory writing a 4-up sheet whose quarters are solid, distinct colors."""

    def _make(path: Path, size: int = 4) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        sheet = Image.new("RGBA", (size * 4, size))
        for index, color in enumerate(SHEET_COLORS):
            sheet.paste(color, (index * size, 0, (index + 1) * size, size))
        sheet.save(path)
        return path

    return _make
