"""Shared test fixtures for carefeed."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from care.holidays import CalendarConverter  # noqa: E402
from people.models import Person  # noqa: E402


class StubConverter(CalendarConverter):
    """Lunar calendar stub: only the listed dates map to a holiday month/day."""

    def __init__(self, hebrew=None, islamic=None):
        self.hebrew = hebrew or {}
        self.islamic = islamic or {}
        self.calls = 0

    def month_day(self, value, calendar):
        self.calls += 1
        table = self.hebrew if calendar == "hebrew" else self.islamic
        return table.get(value, ("", 0))


class BrokenConverter(CalendarConverter):
    def month_day(self, value, calendar):
        raise RuntimeError("calendar backend unavailable")


@pytest.fixture
def no_lunar():
    """Converter that never matches a lunar holiday."""
    return StubConverter()


@pytest.fixture
def stub_converter():
    return StubConverter


@pytest.fixture
def broken_converter():
    return BrokenConverter()


@pytest.fixture
def make_person():
    """Build a Person from keyword args (camelCase or snake_case)."""

    def _make(id="p1", name="Ava Stone", **kwargs):
        return Person.model_validate({"id": id, "name": name, **kwargs})

    return _make


@pytest.fixture
def mothers_day_2026():
    return date(2026, 5, 10)


@pytest.fixture
def care_config(tmp_path):
    """Config file pointing every path into tmp_path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        f"""
paths:
  people_file: {tmp_path / "people.yaml"}
  relationships_file: {tmp_path / "relationships.yaml"}
  state_db: {tmp_path / "state.db"}
logging:
  level: WARNING
"""
    )
    return cfg
