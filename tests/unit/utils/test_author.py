import subprocess
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from longevity.utils import get_author_email


class TestGetAuthorEmail:
    def test_environment_wins(
        self, monkeypatch: pytest.MonkeyPatch, mocker: MockerFixture
    ) -> None:
        run = mocker.patch("longevity.utils._author.subprocess.run")
        monkeypatch.setenv("LONGEVITY_AUTHOR_EMAIL", "env@example.com")

        assert get_author_email() == "env@example.com"
        run.assert_not_called()

    def test_falls_back_to_git_config(
        self, mocker: MockerFixture, tmp_path: Path
    ) -> None:
        run = mocker.patch(
            "longevity.utils._author.subprocess.run",
            return_value=subprocess.CompletedProcess(
                args=[], returncode=0, stdout="git@example.com\n"
            ),
        )

        assert get_author_email(tmp_path) == "git@example.com"
        assert run.call_args.args[0] == ["git", "config", "--get", "user.email"]
        assert run.call_args.kwargs["cwd"] == str(tmp_path)

    @pytest.mark.parametrize(
        "error",
        [
            subprocess.CalledProcessError(1, ["git"]),
            FileNotFoundError("git"),
        ],
    )
    def test_missing_config_returns_none(
        self, mocker: MockerFixture, error: Exception
    ) -> None:
        mocker.patch("longevity.utils._author.subprocess.run", side_effect=error)

        assert get_author_email() is None

    def test_blank_config_returns_none(self, mocker: MockerFixture) -> None:
        mocker.patch(
            "longevity.utils._author.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=0, stdout="\n"),
        )

        assert get_author_email() is None
