"""The ``longevity`` command-line application."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from longevity.config import LogLevel, find_project_root, safe_load_config
from longevity.utils import create_cli_logger

from ._commands import CLIContext, register_commands

_HELP = "Measure how long lines of code survive in a git repository."

_QUIET_LEVELS = frozenset({LogLevel.WARNING, LogLevel.ERROR})


def _build_context(
    repo: Path | None, config: Path | None, *, verbose: bool
) -> CLIContext:
    """Resolve settings and the logger for one invocation."""
    root = find_project_root(repo) if repo is not None else None
    settings, config_error = safe_load_config(
        config_path=config, project_root=root or repo
    )

    level = settings.logging.level
    if verbose and level in _QUIET_LEVELS:
        level = LogLevel.INFO
    logger = create_cli_logger(
        level=level.value,
        log_format=settings.logging.format.value,  # type: ignore[arg-type]
        log_file=settings.logging.file,
    )
    return CLIContext(
        config=settings,
        repo_root=repo,
        verbose=verbose,
        config_error=config_error,
        logger=logger,
    )


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Assemble the application and its meta entry point.

    ``app.meta(tokens)`` handles ``--repo``, ``--config`` and ``--verbose``
    and then dispatches to a command. Calling ``app(tokens)`` directly skips
    the global options and runs against the default context.

    Args:
        console: Where help and command output are printed.
        error_console: Where parse errors are printed.
        exit_on_error: Whether a parse error terminates the process.
    """
    app = App(
        name="longevity",
        help=_HELP,
        help_on_error=True,
        console=console or Console(),
        error_console=error_console or Console(stderr=True),
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _launch(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        repo: Annotated[
            Path | None, Parameter(name="--repo", help="Path inside the repository")
        ] = None,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        verbose: Annotated[bool, Parameter(help="Log progress events")] = False,
    ) -> None:
        """Run a longevity command.

        Args:
            tokens: The command and its arguments.
            repo: Directory inside the repository to analyse.
            config: Read settings from this file only.
            verbose: Lower the log threshold to info.
        """
        CLIContext.set_current(_build_context(repo, config, verbose=verbose))
        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


app = create_app()


def main() -> None:
    create_app().meta()


if __name__ == "__main__":
    main()
