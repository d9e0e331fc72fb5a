"""
Command Line Interface

pr-inspection parse DIFF [--file PATH]
pr-inspection fix DIFF REVIEW [--file PATH]
pr-inspection [--config CONFIG] review DIFF --file PATH
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .assistant import InspectionAssistant
from .config import AppConfig, ConfigManager
from .diff.parser import DiffParser
from .llm.client import ChatCompletionsClient
from .models.diff import ParsedDiff
from .models.review import Review
from .review.fixer import CommentPositionFixer


def _read_text(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    return Path(path).read_text(encoding='utf-8')


def _summarize(parsed_diff: ParsedDiff) -> dict:
    return {
        'files': [
            {
                'path': file_diff.path,
                'changeType': file_diff.change_type,
                'binary': file_diff.is_binary,
                'chunks': len(file_diff.chunks),
                'additions': file_diff.additions,
                'deletions': file_diff.deletions,
                'targetLines': file_diff.target_line_numbers(),
            }
            for file_diff in parsed_diff
        ],
        'failures': [
            {'filePath': failure.file_path, 'header': failure.header, 'message': failure.message}
            for failure in parsed_diff.failures
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pr-inspection', description='Pull request inspection helpers')
    parser.add_argument('--config', help='YAML config file (defaults to environment variables)')
    subcommands = parser.add_subparsers(dest='command', required=True)

    parse_cmd = subcommands.add_parser('parse', help='Print the structure of a unified diff')
    parse_cmd.add_argument('diff', help="Diff file ('-' for stdin)")
    parse_cmd.add_argument('--file', help='Path for hunks without a file header')

    fix_cmd = subcommands.add_parser('fix', help='Correct review thread positions against a diff')
    fix_cmd.add_argument('diff', help="Diff file ('-' for stdin)")
    fix_cmd.add_argument('review', help='Review JSON file')
    fix_cmd.add_argument('--file', help='Path for hunks without a file header')

    review_cmd = subcommands.add_parser('review', help='Request a review of one file diff from the model')
    review_cmd.add_argument('diff', help="Diff file ('-' for stdin)")
    review_cmd.add_argument('--file', required=True, help='Path of the file under review')
    review_cmd.add_argument('--description', default='', help='Pull request description')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig.from_yaml(args.config) if args.config else AppConfig.from_env()
        config = ConfigManager(config).config
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        # Unreadable config file or invalid setting value
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    diff_text = _read_text(args.diff)

    if args.command == 'parse':
        parsed_diff = DiffParser().parse(diff_text, file_path=args.file)
        print(json.dumps(_summarize(parsed_diff), indent=2))
        return 1 if parsed_diff.has_failures else 0

    if args.command == 'fix':
        review = Review.from_model_output(_read_text(args.review))
        fixed = CommentPositionFixer().fix(review, diff_text, file_path=args.file)
        print(json.dumps(fixed.to_payload(), indent=2))
        return 0

    try:
        config.validate(require_api_key=True)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    assistant = InspectionAssistant(client=ChatCompletionsClient.from_config(config.model), config=config)
    review = assistant.review_file(diff_text, args.file, pull_request_description=args.description)
    print(json.dumps(review.to_payload(), indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
