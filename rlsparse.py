#!/usr/bin/env python3
"""
rlsparse - Release name parser.

This module serves dual purposes:
1. Library: ReleaseParser class for extracting metadata from release names
2. Command line tool: parses names given as arguments, from a file or stdin,
   and writes one JSON object per line

Usage as library:
    from rlsparse import ReleaseParser
    parser = ReleaseParser()
    release = parser.parse("The.Matrix.1999.1080p.BluRay.x264-GROUP")

Usage as command line tool:
    python rlsparse.py "The.Matrix.1999.1080p.BluRay.x264-GROUP"
    python rlsparse.py --input names.txt --tags
    cat names.txt | python rlsparse.py --input - --type-only
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO

from rls import (
    ParserConfig,
    Release,
    ReleaseBuilder,
    ReleaseType,
    RlsError,
    TokenizationResult,
    Tokenizer,
    load_config,
)
from rls.dictionary_loader import DictionaryLoader

logger = logging.getLogger(__name__)


# ============================================================================
# CORE PARSING - ReleaseParser Class
# ============================================================================

class ReleaseParser:
    """Parser for extracting metadata from release names."""

    def __init__(self, config: Optional[ParserConfig] = None):
        """
        Initialize the release parser.

        Args:
            config: Optional prebuilt configuration. The default vocabulary is
                    loaded (and cached) when omitted, so every parser in a
                    process shares the same registry and lexers.
        """
        if config is None:
            DictionaryLoader.preload_all()
            config = load_config()
        self.config = config
        self.tokenizer = Tokenizer(config)
        self.builder = ReleaseBuilder(config.registry)

    def tokenize(self, name: str) -> TokenizationResult:
        """Split a release name into tags without building a Release."""
        self._check(name)
        return self.tokenizer.tokenize(name)

    def parse(self, name: str) -> Release:
        """
        Full parsing pipeline.

        Pipeline order:
        1. Tokenize (once-lexers, then the scan loop)
        2. Initial fixups, collect, inspect, unset, re-collect, re-inspect
        3. Special date, titles, unused text

        Args:
            name: Release name

        Returns:
            Release with every recognized field populated

        Raises:
            TypeError: If name is not a string
        """
        result = self.tokenize(name)
        return self.builder.build(result.tags, result.pivot)

    def parse_type_only(self, name: str) -> ReleaseType:
        """Infer only the release type, skipping title extraction."""
        result = self.tokenize(name)
        return self.builder.build_type_only(result.tags, result.pivot).type

    @staticmethod
    def _check(name: Any):
        if not isinstance(name, str):
            raise TypeError(f"release name must be a str, not {type(name).__name__}")


# ============================================================================
# COMMAND LINE
# ============================================================================

def iter_names(names: Iterable[str], input_path: Optional[str], stdin: Optional[TextIO] = None) -> Iterator[str]:
    """Names from the command line followed by the non-blank lines of the input file."""
    yield from names
    if not input_path:
        return
    if input_path == "-":
        lines = (stdin or sys.stdin).read().splitlines()
    else:
        with open(input_path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    for line in lines:
        line = line.strip()
        if line:
            yield line


def render(parser: ReleaseParser, name: str, type_only: bool = False, tags: bool = False) -> Dict[str, Any]:
    """JSON-ready output record for one name."""
    if type_only:
        return {"input": name, "type": str(parser.parse_type_only(name))}
    release = parser.parse(name)
    record: Dict[str, Any] = {"input": name}
    record.update(release.to_dict())
    if tags:
        record["tags"] = "".join(t.format("e") for t in release.tags)
    return record


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Parse release names into structured metadata (one JSON object per line)'
    )
    parser.add_argument(
        'names',
        nargs='*',
        metavar='NAME',
        help='Release names to parse'
    )
    parser.add_argument(
        '--input',
        metavar='FILE',
        help='File with one release name per line ("-" for stdin)'
    )
    parser.add_argument(
        '--type-only',
        action='store_true',
        help='Only infer the release type'
    )
    parser.add_argument(
        '--tags',
        action='store_true',
        help='Include the <Type:value> token dump'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def main(argv: Optional[List[str]] = None, stdout: Optional[TextIO] = None) -> int:
    stdout = stdout or sys.stdout
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.names and not args.input:
        logger.error("No release names given (pass NAME arguments or --input FILE)")
        return 2

    try:
        parser = ReleaseParser()
        count = 0
        for name in iter_names(args.names, args.input):
            stdout.write(json.dumps(render(parser, name, args.type_only, args.tags), ensure_ascii=False) + "\n")
            count += 1
    except RlsError as exc:
        logger.error("Configuration error: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Cannot read input: %s", exc)
        return 1

    logger.debug("Parsed %s names", count)
    return 0


if __name__ == '__main__':
    sys.exit(main())
