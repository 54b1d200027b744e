"""Shared test fixtures for longevity tests."""

import os
from collections.abc import Callable

import pytest
from rich.console import Console

from longevity.repository import Commit, FakeRepository


@pytest.fixture(autouse=True)
def isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    """Keep user configuration and LONGEVITY_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("LONGEVITY_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("config")))


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def fake_repo() -> FakeRepository:
    """Create an empty in-memory repository."""
    return FakeRepository()


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Return a factory for standalone commits, one day apart by number."""

    def _make(
        number: int = 1,
        *,
        commit_time: int | None = None,
        author_email: str = "dev@example.com",
        parents: tuple[str, ...] = (),
    ) -> Commit:
        return Commit(
            sha=f"{number:040x}",
            parents=parents,
            author_name="Dev",
            author_email=author_email,
            commit_time=commit_time if commit_time is not None else number * 86_400,
            message=f"commit {number}",
        )

    return _make
