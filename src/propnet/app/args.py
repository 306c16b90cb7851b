# Propnet drives propagator networks to a fixed point.
# Copyright (C) 2024 Josua Krause
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Command line arguments for the propnet CLI."""
import argparse
import sys
from collections.abc import Callable

from propnet.app.run import run_start


def parse_args_run(parser: argparse.ArgumentParser) -> None:
    """
    Parse command line arguments for running a network.

    Args:
        parser (argparse.ArgumentParser): The argument parser.
    """
    parser.add_argument(
        "--network",
        type=str,
        required=True,
        help="network definition json file")
    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="indentation of the printed result")


def display_welcome(args: argparse.Namespace, command: str) -> None:
    """
    Prints the welcome message to stderr if `--no-welcome` is unset.

    Args:
        args (argparse.Namespace): The arguments.
        command (str): The name of the command.
    """
    if args.no_welcome:
        return
    import propnet  # pylint: disable=import-outside-toplevel

    print(
        f"Starting {propnet.__name__}({propnet.__version__}) as {command}",
        file=sys.stderr)
    print(f"python version: {sys.version}", file=sys.stderr)


def parse_args(
        argv: list[str] | None = None) -> tuple[
            argparse.Namespace,
            Callable[[argparse.Namespace], Callable[[], int | None]]]:
    """
    Parse command line arguments for the propnet CLI.

    Args:
        argv (list[str] | None, optional): The arguments. If None, the
            arguments of the process are used. Defaults to None.

    Returns:
        tuple[
                argparse.Namespace,
                Callable[[argparse.Namespace], Callable[[], int | None]]]: A
            tuple of the parsed arguments and the execute function to run.
    """
    parser = argparse.ArgumentParser(
        description="Run a propagator network.")
    subparser = parser.add_subparsers(title="Commands", required=True)

    def run_network(args: argparse.Namespace) -> Callable[[], int | None]:
        display_welcome(args, "run")
        return run_start(
            config_file=args.config,
            network_file=args.network,
            indent=args.indent)

    subparser_run = subparser.add_parser("run")
    subparser_run.set_defaults(func=run_network)
    parse_args_run(subparser_run)

    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="json config file")
    parser.add_argument(
        "--no-welcome",
        action="store_true",
        help="suppresses the welcome message")

    args = parser.parse_args(argv)
    return args, args.func
