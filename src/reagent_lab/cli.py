"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
from typing import Any, Optional, Sequence

from reagent_lab.definition import load_laboratory
from reagent_lab.errors import ReagentLabError
from reagent_lab.io_utils import dump_json
from reagent_lab.laboratory import Laboratory
from reagent_lab.logging_utils import (
    configure_logging,
    log_exception,
    parse_level,
    run_with_error_handling,
    set_level,
)


def _parse_addition(text: str) -> tuple[str, float]:
    name, sep, amount = text.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=QUANTITY, got {text!r}")
    try:
        return name, float(amount)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"quantity for {name!r} is not a number: {amount!r}"
        ) from None


def _describe(lab: Laboratory) -> dict[str, Any]:
    return {
        "substances": list(lab.substances),
        "products": list(lab.products),
        "components": [
            {
                "id": component.id,
                "members": list(component.members),
                "cyclic": component.cyclic,
            }
            for component in lab.components
        ],
        "inventory": lab.snapshot(),
    }


def _show_handler(args: argparse.Namespace) -> None:
    lab = load_laboratory(args.definition)
    print(dump_json(_describe(lab)), end="")


def _make_handler(args: argparse.Namespace) -> None:
    lab = load_laboratory(args.definition)
    for name, amount in args.add or ():
        lab.add(name, amount)
    produced = lab.make(args.product, args.quantity)
    payload = {
        "product": args.product,
        "requested": args.quantity,
        "produced": produced,
        "inventory": lab.snapshot(),
    }
    print(dump_json(payload), end="")


def _register_help_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    parser: argparse.ArgumentParser,
) -> None:
    def _handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    help_parser = subparsers.add_parser(
        "help",
        help="Show top-level help.",
        description="Show top-level help.",
    )
    help_parser.set_defaults(handler=_handler)


def _register_show_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    show_parser = subparsers.add_parser(
        "show",
        help="Print inventory and recipe components of a lab definition.",
        description="Load a lab definition and print its inventory and SCCs as JSON.",
    )
    show_parser.add_argument(
        "definition",
        help="Path to a YAML or JSON lab definition.",
    )
    show_parser.set_defaults(handler=_show_handler)


def _register_make_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    make_parser = subparsers.add_parser(
        "make",
        help="Produce a product from a lab definition's stock.",
        description=(
            "Load a lab definition, optionally add stock, produce a product and "
            "print the result and resulting inventory as JSON. Nothing is saved."
        ),
    )
    make_parser.add_argument(
        "definition",
        help="Path to a YAML or JSON lab definition.",
    )
    make_parser.add_argument("product", help="Product to make.")
    make_parser.add_argument("quantity", type=float, help="Quantity requested.")
    make_parser.add_argument(
        "--add",
        action="append",
        type=_parse_addition,
        metavar="NAME=QUANTITY",
        help="Add stock before producing (repeatable).",
    )
    make_parser.set_defaults(handler=_make_handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reagent-lab",
        description="reagent_lab command line interface.",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full traceback on errors.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    _register_help_subcommand(subparsers, parser)
    _register_show_subcommand(subparsers)
    _register_make_subcommand(subparsers)
    return parser


def _cli_main(
    *,
    cli_logger: logging.Logger,
    argv: Optional[Sequence[str]] = None,
) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        raise SystemExit(2)
    try:
        level = parse_level(args.log_level)
        set_level(cli_logger, level)
        args.handler(args)
    except ReagentLabError as exc:
        log_exception(cli_logger, exc, show_traceback=args.traceback)
        raise SystemExit(1) from None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    logger = configure_logging()
    run_with_error_handling(_cli_main, logger=logger, cli_logger=logger, argv=argv)


if __name__ == "__main__":
    main()
