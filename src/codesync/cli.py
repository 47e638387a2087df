"""Command line entry point for codesync.

Each subcommand loads the hierarchical config, builds a
``ProjectContext`` and runs one operation:

- ``heads`` -- print the branch heads of a repository.
- ``revisions-since-equivalence`` -- revisions not yet migrated.
- ``last-equivalence`` -- nearest recorded equivalence below a revision.
- ``note-equivalence`` -- record that two revisions hold the same code.
- ``merge-codebases`` -- three-way merge of three directory snapshots.

Results go to stdout, logs and errors to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from codesync import __version__
from codesync.codebase import (
    Codebase,
    CodebaseMerger,
    format_equivalence,
    format_merge_report,
    format_revisions,
    report_to_json,
)
from codesync.codebase.merger import MERGED_CODEBASE_PREFIX
from codesync.config_loader import load_hierarchical_config
from codesync.config_schema import build_config
from codesync.context import ProjectContext
from codesync.core.commands import CommandError
from codesync.core.errors import SyncProblem
from codesync.database import Equivalence, EquivalenceMatcher
from codesync.file_handler import Lifetime
from codesync.history.models import Revision
from codesync.logger import setup_logging

logger = logging.getLogger(__name__)


def _revision_arg(value: str) -> tuple[str, str]:
    """Parse ``NAME:REV`` into ``(repository_name, rev_id)``."""
    name, sep, rev_id = value.partition(":")
    if not sep or not name or not rev_id:
        raise argparse.ArgumentTypeError(
            f"expected REPOSITORY:REVISION, got '{value}'"
        )
    return name, rev_id


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codesync",
        description="codesync - track equivalent revisions across repositories "
        "and merge codebases between them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the head of each configured branch
  codesync heads --repository internal

  # Which internal revisions have not been exported yet?
  codesync revisions-since-equivalence --from-repository internal \\
      --to-repository public

  # Record that internal@abc123 and public@42 hold the same code
  codesync note-equivalence --repo1 internal:abc123 --repo2 public:42

  # Merge incoming changes into a destination checkout
  codesync merge-codebases --orig base/ --mod incoming/ --dest checkout/

Config is read from $CODESYNC_CONFIG, ./.codesync/config.yml or
~/.config/codesync/config.yml unless --config is given.
        """,
    )
    parser.add_argument("--config", help="Config file (overrides discovery)")
    parser.add_argument(
        "--db", help="Equivalence store path (overrides db.path in config)"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also append logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"codesync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    heads = sub.add_parser("heads", help="Print branch heads of a repository")
    heads.add_argument("--repository", required=True)
    heads.set_defaults(func=cmd_heads)

    since = sub.add_parser(
        "revisions-since-equivalence",
        help="List revisions with no equivalence in another repository",
    )
    since.add_argument("--from-repository", required=True)
    since.add_argument("--to-repository", required=True)
    since.add_argument(
        "--revision", help="Start here instead of at the branch heads"
    )
    since.set_defaults(func=cmd_revisions_since_equivalence)

    last = sub.add_parser(
        "last-equivalence", help="Find the nearest recorded equivalence"
    )
    last.add_argument("--repository", required=True)
    last.add_argument("--revision", required=True)
    last.add_argument("--with-repository", required=True)
    last.set_defaults(func=cmd_last_equivalence)

    note = sub.add_parser(
        "note-equivalence", help="Record an equivalence in the store"
    )
    note.add_argument(
        "--repo1", type=_revision_arg, required=True, metavar="NAME:REV"
    )
    note.add_argument(
        "--repo2", type=_revision_arg, required=True, metavar="NAME:REV"
    )
    note.set_defaults(func=cmd_note_equivalence)

    merge = sub.add_parser(
        "merge-codebases", help="Three-way merge of directory snapshots"
    )
    merge.add_argument("--orig", required=True, help="Common ancestor")
    merge.add_argument("--mod", required=True, help="Incoming changes")
    merge.add_argument("--dest", required=True, help="Destination")
    merge.add_argument(
        "--output", help="Output directory (default: new temp directory)"
    )
    merge.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    merge.set_defaults(func=cmd_merge_codebases)

    return parser


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


def cmd_heads(context: ProjectContext, args: argparse.Namespace) -> int:
    for head in context.history(args.repository).find_head_revisions():
        print(head)
    return 0


def cmd_revisions_since_equivalence(
    context: ProjectContext, args: argparse.Namespace
) -> int:
    history = context.history(args.from_repository)
    context.history(args.to_repository)  # fail fast on a typo
    start = None
    if args.revision:
        start = history.find_highest_revision(args.revision)
    matcher = EquivalenceMatcher(args.to_repository, context.db)
    print(format_revisions(history.find_revisions(matcher, start)))
    return 0


def cmd_last_equivalence(
    context: ProjectContext, args: argparse.Namespace
) -> int:
    history = context.history(args.repository)
    revision = history.find_highest_revision(args.revision)
    matcher = EquivalenceMatcher(args.with_repository, context.db)
    print(format_equivalence(history.find_last_equivalence(revision, matcher)))
    return 0


def cmd_note_equivalence(
    context: ProjectContext, args: argparse.Namespace
) -> int:
    revisions: list[Revision] = []
    for name, rev_id in (args.repo1, args.repo2):
        revisions.append(context.history(name).find_highest_revision(rev_id))
    equivalence = Equivalence(rev1=revisions[0], rev2=revisions[1])
    context.db.note_equivalence(equivalence)
    context.db.save()
    print(f"Noted equivalence: {equivalence}")
    return 0


def cmd_merge_codebases(
    context: ProjectContext, args: argparse.Namespace
) -> int:
    if args.output:
        output_dir = Path(args.output)
    else:
        # The user resolves conflicts in place, so the output must outlive us.
        output_dir = context.temp_dirs.create(
            MERGED_CODEBASE_PREFIX, Lifetime.PERSISTENT
        )
    merger = CodebaseMerger(
        orig=Codebase(Path(args.orig), "orig"),
        mod=Codebase(Path(args.mod), "mod"),
        dest=Codebase(Path(args.dest), "dest"),
        oracle=context.oracle,
        output_dir=output_dir,
        temp_dirs=context.temp_dirs,
    )
    result = merger.merge()
    merger.report()
    if args.json:
        print(json.dumps(report_to_json(result), indent=2))
    else:
        print(format_merge_report(result))
    # Conflicts are a normal outcome, not a failure.
    return 0


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the selected command and return the exit status."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        raw = load_hierarchical_config(
            Path(args.config) if args.config else None
        )
        config = build_config(raw)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        # pydantic.ValidationError is a ValueError
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        debug=args.debug,
        log_file=args.log_file or config.logging.file,
        debug_format=config.logging.format,
        level=config.logging.level,
    )

    try:
        context = ProjectContext.from_config(config, db_path=args.db)
    except (SyncProblem, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        return args.func(context, args)
    except (SyncProblem, CommandError, ValidationError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 1
    finally:
        context.close()


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
