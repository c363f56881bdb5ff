#!/usr/bin/env python3
"""
Command line entrypoint for the storyboard scene tools.

Usage:
    python main.py merge existing.json regenerated.json -o merged.json
    python main.py merge existing.json regenerated.json --report report.json
    python main.py normalize storyboard.yaml -o fixed.yaml
    python main.py check storyboard.json
    python main.py apply-update existing.json assistant_reply.txt -o merged.json

Snapshots are JSON or YAML files holding either a list of sections or an
object with a "sections" key (other keys are kept when writing output).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog
import yaml

from config import settings
from storyboard.errors import ErrorCode, StoryboardError
from storyboard.ids import repair_loaded_sections, validate_scene_ids
from storyboard.models import Section, dump_sections, load_sections
from storyboard.reconciler import reconcile_scenes
from storyboard.structure_update import merge_assistant_reply

JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging; log lines go to stderr so stdout stays clean."""
    level_name = (level or settings.LOG_LEVEL).upper()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger()


def read_text(path: Path) -> str:
    if not path.exists():
        raise StoryboardError(
            ErrorCode.FILE_NOT_FOUND,
            f"File not found: {path}",
            {"path": str(path)},
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise StoryboardError(
            ErrorCode.INVALID_INPUT,
            f"Failed to read {path}: {e}",
            {"path": str(path)},
        )


def load_snapshot(path: Path) -> Any:
    """
    Load a storyboard snapshot from a JSON or YAML file.

    Raises:
        StoryboardError: If the file is missing, has an unknown suffix or fails to parse
    """
    suffix = path.suffix.lower()
    if suffix not in JSON_SUFFIXES | YAML_SUFFIXES:
        raise StoryboardError(
            ErrorCode.UNSUPPORTED_FORMAT,
            f"Unsupported snapshot format: {path.name}",
            {"path": str(path)},
        )

    text = read_text(path)

    try:
        if suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise StoryboardError(
            ErrorCode.INVALID_INPUT,
            f"Failed to parse {path.name}: {e}",
            {"path": str(path)},
        )

    logger.info("snapshot_loaded", path=str(path))
    return data


def wrap_sections(original: Any, sections: List[Section]) -> Any:
    """Put sections back into the snapshot shape they were loaded from."""
    dumped = dump_sections(sections)
    if isinstance(original, dict):
        return {**original, "sections": dumped}
    return dumped


def _json_default(value: Any) -> str:
    """Render values YAML can produce but JSON cannot (dates, timestamps)."""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def render_output(data: Any, yaml_output: bool = False) -> str:
    if yaml_output:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False, default=_json_default) + "\n"


def write_output(data: Any, output: Optional[Path]) -> None:
    """Write JSON/YAML to a file, or JSON to stdout when no path is given."""
    if output is None:
        sys.stdout.write(render_output(data))
        return

    # Render fully first so a serialization failure never leaves a truncated file
    text = render_output(data, yaml_output=output.suffix.lower() in YAML_SUFFIXES)
    try:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise StoryboardError(
            ErrorCode.INVALID_INPUT,
            f"Failed to write {output}: {e}",
            {"path": str(output)},
        )
    logger.info("snapshot_written", path=str(output))


def cmd_merge(args) -> int:
    existing = load_snapshot(args.existing)
    regenerated = load_snapshot(args.new)

    report = reconcile_scenes(existing, regenerated)
    write_output(wrap_sections(existing, report.sections), args.output)

    if args.report:
        write_output(report.summary(), args.report)
    return 0


def cmd_normalize(args) -> int:
    data = load_snapshot(args.file)
    sections = repair_loaded_sections(data)
    write_output(wrap_sections(data, sections), args.output)
    return 0


def cmd_check(args) -> int:
    data = load_snapshot(args.file)
    if validate_scene_ids(load_sections(data)):
        print(f"✅ All scene IDs are valid: {args.file}")
        return 0
    print(f"❌ Invalid scene IDs found: {args.file}")
    return 1


def cmd_apply_update(args) -> int:
    existing = load_snapshot(args.existing)
    reply = read_text(args.reply)

    report = merge_assistant_reply(existing, reply)
    if report is None:
        print("📝 Regular chat response (not a structure update); nothing to apply", file=sys.stderr)
        return 1

    write_output(wrap_sections(existing, report.sections), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storyboard scene id tools")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG, WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser("merge", help="Merge a regenerated storyboard into an existing one")
    merge.add_argument("existing", type=Path, help="Current storyboard snapshot")
    merge.add_argument("new", type=Path, help="Regenerated storyboard snapshot")
    merge.add_argument("-o", "--output", type=Path, help="Write merged snapshot here (default: stdout)")
    merge.add_argument("--report", type=Path, metavar="FILE", help="Write a merge report (JSON, or YAML by suffix)")
    merge.set_defaults(func=cmd_merge)

    normalize = subparsers.add_parser("normalize", help="Assign ids to scenes with missing or invalid ids")
    normalize.add_argument("file", type=Path)
    normalize.add_argument("-o", "--output", type=Path)
    normalize.set_defaults(func=cmd_normalize)

    check = subparsers.add_parser("check", help="Exit with status 1 if any scene id is invalid")
    check.add_argument("file", type=Path)
    check.set_defaults(func=cmd_check)

    apply_update = subparsers.add_parser("apply-update", help="Apply an assistant reply's structure update")
    apply_update.add_argument("existing", type=Path, help="Current storyboard snapshot")
    apply_update.add_argument("reply", type=Path, help="Text file with the raw assistant reply")
    apply_update.add_argument("-o", "--output", type=Path)
    apply_update.set_defaults(func=cmd_apply_update)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.func(args)
    except StoryboardError as e:
        e.log_error()
        print(f"❌ {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
