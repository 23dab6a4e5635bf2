"""Tests for logging setup."""

import sys
from collections.abc import Iterator

import pytest
from loguru import logger

from harada_pillars.core.tree.generation import create_tree
from harada_pillars.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_verbose_shows_package_debug_records(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose=True)
    create_tree("Goal", 1, user_id="user1")
    err = capsys.readouterr().err
    assert "Created tree" in err
    assert "harada_pillars.core.tree.generation" in err


def test_default_level_hides_debug(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("HARADA_PILLARS_LOG_LEVEL", raising=False)
    configure_logging()
    create_tree("Goal", 1, user_id="user1")
    assert "Created tree" not in capsys.readouterr().err


def test_level_from_environment(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("HARADA_PILLARS_LOG_LEVEL", "debug")
    configure_logging()
    create_tree("Goal", 1, user_id="user1")
    assert "Created tree" in capsys.readouterr().err


def test_records_from_other_packages_are_dropped(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose=True)
    logger.warning("not from the planner")
    assert "not from the planner" not in capsys.readouterr().err
