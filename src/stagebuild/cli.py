"""
Command-line interface for stagebuild.

    stagebuild                       # stage, compile, package, collect binaries
    stagebuild -test                 # run the test package
    stagebuild -install              # install into /usr/local/bin
    stagebuild -install -prefix ~/.local
"""

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Optional

from rich.console import Console

from stagebuild import __version__
from stagebuild.config import BuildMode, load_config
from stagebuild.errors import StageBuildError
from stagebuild.output import init_timer, log, set_verbose
from stagebuild.pipeline import PipelineDriver
from stagebuild.summary import print_summary


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stagebuild",
        description="Stage sources into a build workspace, compile them and collect the binaries",
    )
    parser.add_argument("--version", action="version", version=f"stagebuild {__version__}")

    parser.add_argument("-test", "--test", action="store_true", help="Run the test cases (wins over -install)")
    parser.add_argument("-install", "--install", action="store_true", help="Install to the specified prefix")

    parser.add_argument(
        "-prefix",
        "--prefix",
        default="",
        help="Specifies the prefix where files will be installed (default: /usr/local)",
    )
    parser.add_argument(
        "-C",
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Project root directory (default: current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    return parser


def _select_mode(args: argparse.Namespace) -> BuildMode:
    if args.test:
        return BuildMode.TEST
    if args.install:
        return BuildMode.INSTALL
    return BuildMode.BUILD


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point of the ``stagebuild`` console script. Always exits."""
    args = create_parser().parse_args(argv)

    init_timer()
    set_verbose(args.verbose)
    _configure_logging(args.verbose)

    console = Console()
    err_console = Console(stderr=True)

    try:
        config = load_config(
            project_dir=args.project_dir,
            mode=_select_mode(args),
            prefix=args.prefix,
            verbose=args.verbose,
        )
        log(f"stagebuild v{__version__}: {config.mode.value} in {config.project_dir}")
        result = PipelineDriver(config).run()

        console.print()
        print_summary(result, console)
        console.print(f"[bold green]✓ {config.mode.value.capitalize()} successful![/bold green]")
        sys.exit(0)

    except StageBuildError as e:
        err_console.print()
        err_console.print("[bold red]✗ Build failed![/bold red]")
        err_console.print(str(e), markup=False, soft_wrap=True)
        if args.verbose:
            err_console.print(traceback.format_exc(), markup=False)
        sys.exit(1)

    except KeyboardInterrupt:
        err_console.print()
        err_console.print("[bold yellow]✗ Build interrupted[/bold yellow]")
        sys.exit(130)  # Standard exit code for SIGINT

    except Exception as e:
        err_console.print()
        err_console.print("[bold red]✗ Unexpected error[/bold red]")
        err_console.print(f"{type(e).__name__}: {e}", markup=False, soft_wrap=True)
        if args.verbose:
            err_console.print(traceback.format_exc(), markup=False)
        sys.exit(1)


if __name__ == "__main__":
    main()
