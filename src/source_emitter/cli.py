"""CLI entry point for source_emitter."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .errors import SourceEmitterError
from .model_loader import load_source_file
from .output import display_resolution

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Emit a source file from a JSON declaration model")
    parser.add_argument(
        "model",
        help="JSON declaration model",
        type=Path,
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write the file below this directory instead of printing it",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show how every reference was resolved",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging output",
    )
    return parser.parse_args()


def main() -> None:
    """Run the CLI application."""
    console = Console()
    args = parse_args()

    # Configure logging
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logger.debug("Debug logging enabled")

    # Validate model file
    if not args.model.exists():
        console.print(f"[red]Error: File {args.model} does not exist[/red]")
        sys.exit(1)

    if not args.model.is_file():
        console.print(f"[red]Error: {args.model} is not a file[/red]")
        sys.exit(1)

    if args.model.suffix != ".json":
        console.print(f"[red]Error: {args.model} is not a JSON file[/red]")
        sys.exit(1)

    try:
        source_file = load_source_file(args.model)

        if args.explain:
            display_resolution(console, source_file.resolve())

        if args.output_dir is not None:
            path = source_file.write_to(args.output_dir)
            console.print(f"[green]Wrote {path}[/green]")
        else:
            # Emitted text is written verbatim.
            sys.stdout.write(str(source_file))

    except SourceEmitterError as e:
        console.print(f"[red]Error emitting {args.model}: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
