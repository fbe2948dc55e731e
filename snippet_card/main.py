"""Snippet card generator - command line entry point."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .config import settings
from .errors import FontsMissingError, SnippetCardError
from .fonts import load_fonts
from .pipeline import SnippetCardGenerator
from .utils import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Snippet card generator - turn a news article URL into a shareable image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m snippet_card.main https://example.com/story          # Writes article-card.png
  python -m snippet_card.main URL --no-author --no-date          # Title-only card
  python -m snippet_card.main URL --output cards/story.png       # Custom output path
  python -m snippet_card.main URL --builtin-fonts                # Run without the Inter fonts
        """,
    )

    parser.add_argument("url", help="Article URL")
    parser.add_argument(
        "--no-author",
        action="store_true",
        help="Leave the author lines off the card",
    )
    parser.add_argument(
        "--no-date",
        action="store_true",
        help="Leave the source and date row off the card",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"Output PNG path (default: {settings.output_path})",
    )
    parser.add_argument(
        "--builtin-fonts",
        action="store_true",
        help="Fall back to Pillow's builtin font when the Inter fonts are missing",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    """
    Generate one card and write it to disk.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success)
    """
    try:
        load_fonts(allow_builtin=args.builtin_fonts or None)
    except FontsMissingError as e:
        logger.error(f"{e} (set FONTS_DIR or pass --builtin-fonts)")
        return 1

    generator = SnippetCardGenerator()
    try:
        result = generator.generate(
            args.url,
            include_author=not args.no_author,
            include_date=not args.no_date,
        )
    except SnippetCardError as e:
        logger.error(e.message)
        return 1

    output_path = args.output or settings.output_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.png)
    logger.info(f"Card saved to {output_path}")

    print(json.dumps(result.metadata_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    log_level = "DEBUG" if args.debug else settings.log_level
    setup_logging(level=log_level)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
