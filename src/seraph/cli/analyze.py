"""
Command-line interface for offline profile analysis.

Ranks a local set of posts without fetching or storing anything.

Usage:
    # JSON list of post texts
    seraph-analyze posts.json --username someone

    # Plain text, one post per line
    seraph-analyze posts.txt --output result.json

    # Let very short posts carry evidence
    seraph-analyze posts.txt --min-evidence-tokens 1
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from seraph.analysis.service import build_post_results
from seraph.logging_config import setup_logging
from seraph.models.analysis import AnalysisResult
from seraph.models.document import RawPost
from seraph.ranking.categories import build_default_lexicon
from seraph.ranking.engine import EngineConfig, analyze_posts

logger = structlog.get_logger(__name__)


# ============================================================================
# CLI FUNCTIONS
# ============================================================================

def load_posts(input_path: Path) -> List[str]:
    """
    Read post texts from a file.

    A .json file must hold a list of strings; any other file is read as
    one post per non-blank line.

    Raises:
        ValueError: If a .json file does not hold a list of strings
    """
    content = input_path.read_text(encoding="utf-8")

    if input_path.suffix.lower() == ".json":
        data = json.loads(content)
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise ValueError(f"{input_path} must contain a JSON list of strings")
        return data

    return [line.strip() for line in content.splitlines() if line.strip()]


def analyze_texts(
    texts: List[str],
    username: str = "local_subject",
    min_evidence_tokens: Optional[int] = None,
) -> AnalysisResult:
    """
    Rank post texts with the default lexicon and configured engine.

    Args:
        texts: Post texts
        username: Subject label recorded on the summary
        min_evidence_tokens: Override of the evidence gate

    Returns:
        AnalysisResult for the batch
    """
    config = EngineConfig.from_config()
    if min_evidence_tokens is not None:
        config = dataclasses.replace(config, min_evidence_tokens=min_evidence_tokens)

    posts = [RawPost(post_id=f"post_{index}", body=text) for index, text in enumerate(texts)]
    outcome = analyze_posts(username, posts, build_default_lexicon(), config=config, platform="local")

    return AnalysisResult(summary=outcome.summary, posts=build_post_results(posts, outcome.rows))


def write_output(result: AnalysisResult, output_path: Optional[Path]) -> None:
    """Write the result as indented JSON to a file or stdout."""
    payload = result.model_dump_json(indent=2)

    if not output_path:
        print(payload)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n", encoding="utf-8")
    logger.info("output_written", path=str(output_path), posts=len(result.posts))


# ============================================================================
# MAIN CLI
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seraph CLI - Rank local posts into distress categories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s posts.json --username someone
  %(prog)s posts.txt --output result.json
  %(prog)s posts.txt --min-evidence-tokens 1
        """,
    )

    parser.add_argument(
        "input",
        type=str,
        help="Path to a .json list of post texts or a text file with one post per line",
    )

    parser.add_argument(
        "--username",
        "-u",
        type=str,
        default="local_subject",
        help="Subject label recorded on the summary (default: local_subject)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output file path (default: stdout)",
    )

    parser.add_argument(
        "--min-evidence-tokens",
        "-t",
        type=int,
        default=None,
        help="Minimum tokens for a post to carry evidence (default: from settings)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(json_output=False, stream=sys.stderr)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    if args.min_evidence_tokens is not None and args.min_evidence_tokens < 0:
        print("Error: --min-evidence-tokens must be >= 0", file=sys.stderr)
        return 1

    try:
        texts = load_posts(input_path)
    except (ValueError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = analyze_texts(texts, username=args.username, min_evidence_tokens=args.min_evidence_tokens)
    write_output(result, Path(args.output) if args.output else None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
