import argparse
import json
import logging
import os
import sys
from chmread.lib.exceptions import CHMError
from chmread.lib.search import SearchEngine
from chmread.lib.source import HelpSource


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Dump the outline or search results of an extracted CHM tree to JSON.")
    parser.add_argument("root_dir", help="Directory holding the extracted CHM files.")
    parser.add_argument("--toc", help="Path to the .hhc file (default: first one found under root_dir).")
    parser.add_argument("--search", metavar="KEYWORD", help="Search pages for KEYWORD instead of dumping the outline.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not os.path.isdir(args.root_dir):
        print(f"Error: Directory not found at {args.root_dir}")
        return 1

    try:
        if args.search is not None:
            outcome = SearchEngine().search(args.root_dir, args.search)
            print(json.dumps(outcome.model_dump(), indent=2, ensure_ascii=False))
        else:
            source = HelpSource(root_dir=args.root_dir, toc_path=args.toc)
            print(json.dumps(source.model_dump(exclude={"toc"}), indent=2, ensure_ascii=False))
        return 0
    except CHMError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
