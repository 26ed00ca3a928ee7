# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from reftidy.app import (
    UnknownGroupError,
    enrich_records,
    find_variants,
    library_stats,
    list_issues,
    merge_group,
    review_completeness,
    scan_duplicates,
)
from reftidy.config import configure_logging
from reftidy.domain import InvalidOverrideError, MatchPolicy
from reftidy.domain.similarity import TITLE_MATCH_THRESHOLD

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from reftidy.app import EnrichmentOutcome, MergeOutcome

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tidy a Zotero library")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    duplicates = subparsers.add_parser("duplicates", help="List duplicate groups")
    _add_policy_arguments(duplicates)

    subparsers.add_parser("completeness", help="List records missing required fields")
    subparsers.add_parser("issues", help="List data quality issues by severity")
    subparsers.add_parser("variants", help="List author and tag spelling variants")
    subparsers.add_parser("stats", help="Show library statistics")

    enrich = subparsers.add_parser("enrich", help="Propose field values from Crossref and OpenAlex")
    enrich.add_argument(
        "--key",
        dest="keys",
        action="append",
        help="Record key to enrich (repeatable; default: every record)",
    )
    enrich.add_argument(
        "--apply",
        action="store_true",
        help="Write accepted fields back to the library",
    )

    merge = subparsers.add_parser("merge", help="Merge one duplicate group")
    merge.add_argument("group", help="Group id as printed by 'duplicates', or any member key")
    merge.add_argument(
        "--master",
        type=int,
        default=0,
        help="Index of the record to keep within the group (default: %(default)s)",
    )
    merge.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Override the merged value of a field (repeatable; empty VALUE clears it)",
    )
    merge.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the merge draft without committing it",
    )
    _add_policy_arguments(merge)

    return parser.parse_args(list(argv))


def _add_policy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--title-threshold",
        type=float,
        default=TITLE_MATCH_THRESHOLD,
        help="Minimum title similarity for a fuzzy match (default: %(default)s)",
    )
    parser.add_argument(
        "--ignore-authors",
        action="store_true",
        help="Accept fuzzy title matches without a shared creator surname",
    )


def _build_policy(args: argparse.Namespace) -> MatchPolicy:
    if not 0.0 < args.title_threshold <= 1.0:
        raise ValueError("Title threshold must be in (0, 1]")
    return MatchPolicy(
        title_threshold=args.title_threshold,
        require_author_overlap=not args.ignore_authors,
    )


def _parse_overrides(values: Sequence[str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for item in values:
        name, separator, value = item.partition("=")
        if not separator or not name.strip():
            raise ValueError(f"Invalid override {item!r}; expected FIELD=VALUE")
        overrides[name.strip()] = value
    return overrides


def _print_duplicates(args: argparse.Namespace) -> None:
    groups = scan_duplicates(policy=_build_policy(args))
    for group in groups:
        reasons = ",".join(sorted(group.reasons))
        print(f"{group.group_id}  [{reasons}]  {group.representative.title}")
        for index, member in enumerate(group.members):
            print(f"  {index}: {member.key} v{member.version} {member.record_type}  {member.title}")
    print(f"{len(groups)} duplicate groups")


def _print_completeness() -> None:
    incomplete = review_completeness()
    for entry in incomplete:
        missing = ", ".join(entry.report.required)
        print(f"{entry.record.key}  {entry.record.title or '(untitled)'}  missing: {missing}")
    print(f"{len(incomplete)} incomplete records")


def _print_issues() -> None:
    for entry in list_issues():
        print(f"{entry.record.key}  {entry.record.title or '(untitled)'}")
        for issue in entry.issues:
            print(f"  [{issue.severity}] {issue.message}")


def _print_variants() -> None:
    report = find_variants()
    for label, groups in (("Authors", report.authors), ("Tags", report.tags)):
        print(f"{label}:")
        for group in groups:
            print(f"  {' | '.join(group.names)}")


def _print_stats() -> None:
    stats = library_stats()
    print(f"Items:            {stats.total_items}")
    print(f"Untagged:         {stats.untagged_items}")
    print(f"Missing abstract: {stats.missing_abstracts}")
    print(f"Duplicate groups: {stats.duplicate_groups}")


def _print_enrichment(outcomes: list[EnrichmentOutcome]) -> None:
    for outcome in outcomes:
        accepted = outcome.report.accepted
        if not accepted:
            continue
        print(f"{outcome.record.key}  {outcome.record.title or '(untitled)'}")
        for name, value in accepted.items():
            print(f"  {name}: {outcome.record.get(name)!r} -> {value!r}")
        if outcome.failed:
            print("  apply failed")
        elif outcome.applied is not None:
            print(f"  applied: {outcome.applied!r}")


def _print_merge(outcome: MergeOutcome) -> None:
    draft = outcome.draft
    print(f"Master {draft.master.key} v{draft.master.version} ({draft.record_type})")
    for name, value in draft.fields.items():
        marker = "*" if name in draft.conflicted_fields else " "
        print(f" {marker}{name}: {value!r}")
    print(f"  tags: {', '.join(draft.tags)}")
    for conflict in draft.conflicts:
        options = "; ".join(
            f"{candidate.value!r} ({','.join(candidate.record_keys)})"
            for candidate in conflict.candidates
        )
        print(f"  conflict on {conflict.field}: {options}")
    print(f"Duplicates to delete: {', '.join(ref.key for ref in draft.duplicates)}")
    result = outcome.result
    if result is None:
        print("Dry run; nothing committed")
        return
    print(
        f"Committed: master_updated={result.master_updated} deleted={len(result.deleted)} "
        f"conflicts={len(result.conflicts)} failed={len(result.failed)}"
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        overrides = (
            _parse_overrides(parsed_args.overrides) if parsed_args.command == "merge" else {}
        )
        if parsed_args.command in {"duplicates", "merge"}:
            _build_policy(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "duplicates":
            _print_duplicates(parsed_args)
        elif parsed_args.command == "completeness":
            _print_completeness()
        elif parsed_args.command == "issues":
            _print_issues()
        elif parsed_args.command == "variants":
            _print_variants()
        elif parsed_args.command == "stats":
            _print_stats()
        elif parsed_args.command == "enrich":
            _print_enrichment(enrich_records(keys=parsed_args.keys, apply=parsed_args.apply))
        elif parsed_args.command == "merge":
            outcome = merge_group(
                parsed_args.group,
                master_index=parsed_args.master,
                overrides=overrides,
                policy=_build_policy(parsed_args),
                dry_run=parsed_args.dry_run,
            )
            _print_merge(outcome)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except (UnknownGroupError, InvalidOverrideError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
