"""Command-line interface for StyleScope."""

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path
from typing import List, Optional

from stylescope.config import Config, settings
from stylescope.errors import ExtractionError, InvalidInput
from stylescope.logging_config import setup_logging
from stylescope.service import ExtractionService


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the stylescope command."""
    parser = argparse.ArgumentParser(
        prog='stylescope',
        description='Extract computed CSS styles and themes from rendered web pages'
    )
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Write the JSON result to this file instead of stdout')
    parser.add_argument('--headless', dest='headless', action='store_const', const=True, default=None,
                        help='Run the browser without a window (default)')
    parser.add_argument('--headful', dest='headless', action='store_const', const=False,
                        help='Show the browser window')
    parser.add_argument('--proxy', action='append', default=[], metavar='URL',
                        help='Proxy URL to rotate through (repeatable)')
    parser.add_argument('--timeout', type=int, default=None, metavar='MS',
                        help='Navigation and evaluation timeout in milliseconds')
    parser.add_argument('--wait-for', type=str, default=None, metavar='SELECTOR',
                        help='Selector to wait for after navigation (non-fatal)')
    parser.add_argument('--no-scroll', action='store_true',
                        help='Skip scrolling the page to trigger lazy loading')
    parser.add_argument('--log-level', type=str, default=settings.LOG_LEVEL,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level (default: INFO)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    tree = subparsers.add_parser('tree', help='Extract the pruned per-tag style tree')
    tree.add_argument('url', help='Page URL')
    tree.add_argument('--tags', nargs='+', default=['all'],
                      help="Tag names to extract, or 'all' (default: all)")
    tree.add_argument('--properties', nargs='+', default=['background', 'background-color'],
                      help='CSS properties to extract (default: background background-color)')
    tree.add_argument('--root', choices=['body', 'html'], default=None,
                      help='Element the walk starts from (default: body)')

    theme = subparsers.add_parser('theme', help='Extract the aggregated page theme')
    theme.add_argument('url', help='Page URL')

    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Config from the environment, overridden by command-line flags."""
    config = Config.from_env()
    overrides = {'log_level': args.log_level}
    if args.headless is not None:
        overrides['headless'] = args.headless
    if args.proxy:
        overrides['proxy_urls'] = list(args.proxy)
    if args.timeout:
        overrides['timeout_ms'] = args.timeout
        overrides['evaluation_timeout_ms'] = args.timeout
    if args.wait_for:
        overrides['wait_for_selector'] = args.wait_for
    if args.no_scroll:
        overrides['auto_scroll'] = False
    if getattr(args, 'root', None):
        overrides['tree_root'] = args.root
    return dataclasses.replace(config, **overrides)


async def _run(args: argparse.Namespace, config: Config) -> dict:
    service = ExtractionService(config)
    if args.command == 'tree':
        tags = 'all' if [t.lower() for t in args.tags] == ['all'] else args.tags
        tree = await service.extract_style_tree(args.url, tags=tags, properties=args.properties)
        return tree.to_dict()
    report = await service.extract_theme(args.url)
    return report.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI.

    Returns:
        Exit code: 0 on success, 1 on extraction failure, 2 on invalid input
    """
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=settings.LOG_FILE)

    try:
        config = build_config(args)
        result = asyncio.run(_run(args, config))
    except InvalidInput as e:
        print(json.dumps({'error': str(e)}), file=sys.stderr)
        return 2
    except ValueError as e:
        print(json.dumps({'error': f'Invalid configuration: {e}'}), file=sys.stderr)
        return 2
    except ExtractionError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    output = json.dumps(result, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output + "\n")
        print(f"Saved {args.command} to {output_path}", file=sys.stderr)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
