"""CLI entrypoint for bibliographic record deduplication."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from functools import partial
from pathlib import Path

from dotenv import load_dotenv

from config import load_config, output_dir
from csv_sink import (
    DEDUP_LOG_FILENAME,
    REVIEW_SHEET_FILENAME,
    RESULTS_FILENAME,
    format_similarity,
    read_rows,
    write_dedup_log,
    write_results,
    write_review_sheet,
    write_rows,
)
from dedup import DedupRun, run_subjects, run_table
from models import DedupConfig, FieldMap, ReviewGroup
from orcid_feed import fetch_orcid_works
from review import ReviewPhase, ReviewState, apply_decision
from table_merge import merge_tables

_PREVIEW_FIELDS = ("title", "journal", "doi", "source", "type", "year")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Deduplicate bibliographic records per author or table")
    parser.add_argument(
        "--mode",
        choices=["orcid", "table", "merge"],
        default="table",
        help=(
            "'orcid': fetch each ORCID iD's works and deduplicate per author. "
            "'table' (default): deduplicate the rows of a CSV file. "
            "'merge': merge several CSV files on exact key columns."
        ),
    )
    parser.add_argument("--ids", nargs="*", default=[], help="ORCID iDs to fetch (orcid mode)")
    parser.add_argument("--ids-file", default=None, help="File with one ORCID iD per line (orcid mode)")
    parser.add_argument("--start-year", type=int, default=None, help="Skip works published before this year")
    parser.add_argument("--end-year", type=int, default=None, help="Skip works published after this year")
    parser.add_argument("--input", default=None, help="CSV file to deduplicate (table mode)")
    parser.add_argument("--group-column", default=None, help="Only compare rows sharing this column's value")
    parser.add_argument(
        "--compare-columns",
        nargs="*",
        default=[],
        help="Columns joined into the comparison key (default: the title column)",
    )
    parser.add_argument("--title-column", default="title")
    parser.add_argument("--identifier-column", default="doi", help="DOI-like identifier column; '' disables")
    parser.add_argument("--source-column", default="source", help="Provenance column for survivor priority; '' disables")
    parser.add_argument("--tables", nargs="*", default=[], metavar="NAME=PATH", help="CSV files to merge (merge mode)")
    parser.add_argument(
        "--keys",
        nargs="*",
        default=[],
        metavar="NAME=COL,COL",
        help="Key columns per table, aligned by position (merge mode)",
    )
    parser.add_argument("--primary", default=None, help="Table whose rows win key collisions (merge mode)")
    parser.add_argument("--method", choices=["standard", "advanced"], default=None)
    parser.add_argument("--match-threshold", type=int, default=None, help="Percent above which titles auto-merge")
    parser.add_argument("--review-threshold", type=int, default=None, help="Percent above which titles go to review")
    parser.add_argument("--output-dir", default=None, help="Where result CSVs are written (DEDUP_OUTPUT_DIR)")
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Resolve review groups in the terminal instead of writing a manual review sheet",
    )
    return parser.parse_args(argv)


def run_orcid(
    orcid_ids: list[str],
    config: DedupConfig,
    start_year: int | None = None,
    end_year: int | None = None,
) -> DedupRun:
    """Fetch and deduplicate each ORCID iD's works, one author at a time."""
    fetch = partial(fetch_orcid_works, start_year=start_year, end_year=end_year)
    return run_subjects(orcid_ids, fetch, config)


def run_merge(
    tables: dict[str, str],
    keys: dict[str, list[str]],
    primary: str,
    directory: str | Path,
) -> Path:
    """Merge the named CSV files on their key columns into the results file."""
    rows = merge_tables({name: read_rows(path) for name, path in tables.items()}, keys, primary)
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    path = target / RESULTS_FILENAME
    write_rows(path, rows)
    return path


def review_in_terminal(
    state: ReviewState,
    ask: Callable[[str], str] = input,
    show: Callable[[str], None] = print,
) -> ReviewState:
    """Prompt for a keep-set for every pending group until review is done."""
    while state.phase is ReviewPhase.AWAITING_REVIEW and state.cursor is not None:
        group = state.groups[state.cursor]
        show(_describe_group(group, state.cursor, len(state.groups)))
        try:
            answer = ask("Numbers to keep (comma-separated, blank = all, 0 = none): ")
        except EOFError:
            show("Input closed; remaining groups go to the manual review sheet.")
            break
        keep = _parse_keep(answer, group)
        if keep is None:
            show("Could not parse selection, try again.")
            continue
        state, removed = apply_decision(state, state.cursor, keep)
        show(f"Removed {len(removed)} record(s).")
    return state


def write_outputs(run: DedupRun, directory: str | Path) -> list[Path]:
    """Write results, duplicate log and (if review is pending) the review sheet."""
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)

    written = [target / RESULTS_FILENAME, target / DEDUP_LOG_FILENAME]
    write_results(written[0], run.state.records)
    write_dedup_log(written[1], run.log)

    if run.state.phase is ReviewPhase.AWAITING_REVIEW and run.state.cursor is not None:
        pending = run.state.groups[run.state.cursor:]
        review_path = target / REVIEW_SHEET_FILENAME
        write_review_sheet(review_path, pending)
        written.append(review_path)
    return written


def _describe_group(group: ReviewGroup, index: int, total: int) -> str:
    lines = [f"Review group {index + 1}/{total} ({len(group.members)} records)"]
    for number, member in enumerate(group.members, 1):
        details = ", ".join(
            f"{name}={member.record.fields[name]}"
            for name in _PREVIEW_FIELDS
            if member.record.fields.get(name)
        )
        lines.append(f"  [{number}] similarity={format_similarity(member.score)} {details}")
    return "\n".join(lines)


def _parse_keep(answer: str, group: ReviewGroup) -> list[str] | None:
    answer = answer.strip()
    if not answer:
        return [m.record.local_id for m in group.members]
    if answer == "0":
        return []
    try:
        picks = {int(part) for part in answer.split(",") if part.strip()}
    except ValueError:
        return None
    if not all(1 <= pick <= len(group.members) for pick in picks):
        return None
    return [group.members[pick - 1].record.local_id for pick in sorted(picks)]


def _read_ids(args: argparse.Namespace) -> list[str]:
    ids = [i.strip() for i in args.ids if i.strip()]
    if args.ids_file:
        lines = Path(args.ids_file).read_text(encoding="utf-8").splitlines()
        ids.extend(line.strip() for line in lines if line.strip())
    return ids


def _parse_pairs(values: list[str], flag: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for value in values:
        name, sep, rest = value.partition("=")
        if not sep or not name.strip() or not rest.strip():
            raise SystemExit(f"{flag} expects NAME=VALUE, got {value!r}")
        pairs[name.strip()] = rest.strip()
    return pairs


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute one deduplication run."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    directory = args.output_dir or output_dir()

    if args.mode == "merge":
        if not args.tables or not args.primary:
            raise SystemExit("--tables and --primary are required in merge mode")
        keys = {name: [c.strip() for c in cols.split(",") if c.strip()]
                for name, cols in _parse_pairs(args.keys, "--keys").items()}
        try:
            path = run_merge(_parse_pairs(args.tables, "--tables"), keys, args.primary, directory)
        except ValueError as exc:
            raise SystemExit(f"Merge failed: {exc}") from exc
        logging.info("Output written: %s", path)
        return

    try:
        config = load_config(
            method=args.method,
            match_threshold=args.match_threshold,
            review_threshold=args.review_threshold,
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    if args.mode == "orcid":
        ids = _read_ids(args)
        if not ids:
            raise SystemExit("No ORCID iDs given (use --ids or --ids-file)")
        run = run_orcid(ids, config, start_year=args.start_year, end_year=args.end_year)
    else:
        if not args.input:
            raise SystemExit("--input is required in table mode")
        fields = FieldMap(
            title=args.title_column,
            identifier=args.identifier_column or None,
            source=args.source_column or None,
            compare=tuple(args.compare_columns),
        )
        run = run_table(read_rows(args.input), config, fields=fields, group_column=args.group_column)

    if args.interactive:
        run.state = review_in_terminal(run.state)
        run.stats.final = len(run.state.records)
        logging.info("Review finished. final=%s", run.stats.final)

    for path in write_outputs(run, directory):
        logging.info("Output written: %s", path)

    for subject, message in run.stats.failed_subjects:
        logging.warning("Subject %s failed: %s", subject, message)


if __name__ == "__main__":
    main()
