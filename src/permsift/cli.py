from __future__ import annotations

import argparse
import json
import sys
import time
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from permsift._logging import get_logger, setup_logging
from permsift.diagnostics import CollectingSink, DiagnosticsSink, logging_sink
from permsift.engine import search
from permsift.estimator import estimate_count, permutation_terms
from permsift.models import ConfigError, InvalidArgumentError, Thresholds
from permsift.predicates import PREDICATES, available_predicates, get_predicate
from permsift.settings import load_settings, parse_thresholds
from permsift.utils import read_tokens_file, utc_now_iso

_cli_log = get_logger("cli")

_NONE_FOUND_MESSAGES = {
    "palindrome": (
        "No palindromes were found - you may have to 'borrow or rob' some "
        "from elsewhere."
    ),
}


def _console() -> Console:
    return Console()


def _tee_sink(collector: CollectingSink) -> DiagnosticsSink:
    forward = logging_sink()

    def _emit(line: str) -> None:
        collector(line)
        forward(line)

    return _emit


def _threshold_overrides(args: argparse.Namespace, base: Thresholds) -> Thresholds:
    overrides = {
        "input_size": args.warn_input_size,
        "result_count": args.warn_result_count,
        "elapsed_ms": args.warn_elapsed_ms,
    }
    given = {key: value for key, value in overrides.items() if value is not None}
    if not given:
        return base
    return parse_thresholds(given, label="--warn", base=base)


def _resolve_tokens(
    args: argparse.Namespace, settings_tokens: Sequence[str | None]
) -> list[str | None]:
    cli_tokens: list[str | None] = list(args.token or [])
    if args.tokens_file:
        cli_tokens.extend(read_tokens_file(args.tokens_file))
    if args.token is not None or args.tokens_file:
        return cli_tokens
    return list(settings_tokens)


def _render_search_table(payload: dict[str, Any]) -> None:
    # Tokens, matches and diagnostics are user text; brackets must print as-is.
    console = _console()
    overview = Table(title="Search Summary", show_header=False)
    overview.add_column("Field", style="bold cyan")
    overview.add_column("Value")
    tokens_text = ", ".join(str(t) for t in payload["tokens"]) or "<none>"
    overview.add_row("Tokens", escape(tokens_text))
    overview.add_row("Predicate", escape(str(payload["predicate"])))
    overview.add_row("Candidates Checked", str(payload["stats"]["items_checked"]))
    estimated = payload.get("estimated_count")
    overview.add_row("Theoretical Count", "-" if estimated is None else str(estimated))
    overview.add_row("Matches", str(len(payload["matches"])))
    overview.add_row("Elapsed (ms)", f"{payload['stats']['elapsed_ms']:.3f}")
    console.print(overview)

    matches = list(payload["matches"])
    if not matches:
        console.print(
            _NONE_FOUND_MESSAGES.get(str(payload["predicate"]), "No matches were found."),
            markup=False,
        )
    else:
        table = Table(title="Matches")
        table.add_column("#", justify="right")
        table.add_column("Candidate", style="bold")
        for index, match in enumerate(matches, 1):
            table.add_row(str(index), escape(match))
        console.print(table)

    diagnostics = list(payload.get("diagnostics", []))
    if diagnostics:
        diag_table = Table(title="Diagnostics")
        diag_table.add_column("Line")
        for line in diagnostics:
            diag_table.add_row(escape(line))
        console.print(diag_table)


def _render_estimate_table(payload: dict[str, Any]) -> None:
    console = _console()
    table = Table(title=f"Potential Permutations for {payload['n']} Tokens")
    table.add_column("Slots", justify="right")
    table.add_column("P(n, k)", justify="right")
    for slots, term in enumerate(payload["terms"], 1):
        table.add_row(str(slots), str(term))
    table.add_row("total", str(payload["total"]), style="bold")
    console.print(table)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="permsift",
        description="Search token permutations for candidates passing a predicate",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    search_cmd = sub.add_parser("search", help="Generate and filter candidates")
    search_cmd.add_argument(
        "--token",
        action="append",
        default=None,
        help="Input token (repeatable, order preserved)",
    )
    search_cmd.add_argument(
        "--tokens-file",
        default=None,
        help="Text file with one token per line ('#' comments skipped)",
    )
    search_cmd.add_argument("--settings", default=None, help="Settings YAML path")
    search_cmd.add_argument(
        "--predicate",
        default=None,
        help=f"Predicate name ({', '.join(available_predicates())})",
    )
    search_cmd.add_argument("--warn-input-size", type=int, default=None)
    search_cmd.add_argument("--warn-result-count", type=int, default=None)
    search_cmd.add_argument("--warn-elapsed-ms", type=int, default=None)
    search_cmd.add_argument("--format", choices=["json", "table"], default="table")
    search_cmd.set_defaults(handler=_cmd_search)

    estimate = sub.add_parser(
        "estimate", help="Show the theoretical candidate count for N tokens"
    )
    estimate.add_argument("n", type=int)
    estimate.add_argument("--format", choices=["json", "table"], default="table")
    estimate.set_defaults(handler=_cmd_estimate)

    predicates = sub.add_parser("predicates", help="List registered predicates")
    predicates.set_defaults(handler=_cmd_predicates)
    return parser


def _cmd_search(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    predicate_name = args.predicate.strip() if args.predicate else settings.predicate
    predicate = get_predicate(predicate_name)
    thresholds = _threshold_overrides(args, settings.thresholds)
    tokens = _resolve_tokens(args, settings.resolved_tokens())

    collector = CollectingSink()
    result = search(tokens, predicate, thresholds=thresholds, sink=_tee_sink(collector))
    payload = {
        "generated_at": utc_now_iso(),
        "tokens": tokens,
        "predicate": predicate_name,
        "thresholds": thresholds.to_json(),
        **result.to_json(),
        "diagnostics": list(collector.lines),
    }
    if args.format == "json":
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        _render_search_table(payload)
    return 0


def _cmd_estimate(args: argparse.Namespace) -> int:
    terms = permutation_terms(args.n)
    payload = {"n": args.n, "terms": terms, "total": estimate_count(args.n)}
    if args.format == "json":
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        _render_estimate_table(payload)
    return 0


def _cmd_predicates(args: argparse.Namespace) -> int:
    console = _console()
    table = Table(title="Predicates")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    for name in available_predicates():
        doc = (PREDICATES[name].__doc__ or "").strip().splitlines()
        table.add_row(name, doc[0] if doc else "")
    console.print(table)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    setup_logging()
    parser = _build_parser()
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    args = parser.parse_args(raw_argv)
    command = str(getattr(args, "command", "unknown"))
    argv_text = " ".join(raw_argv)
    started = time.perf_counter()
    _cli_log.info("cli_command_start command=%s argv=%s", command, argv_text)

    exit_code = 1
    try:
        exit_code = int(args.handler(args))
    except ConfigError as exc:
        _cli_log.error(
            "cli_command_error command=%s kind=config error=%s", command, exc
        )
        print(f"[config error] {exc}", file=sys.stderr)
        exit_code = 2
    except InvalidArgumentError as exc:
        _cli_log.error(
            "cli_command_error command=%s kind=invalid_argument error=%s", command, exc
        )
        print(f"[invalid argument] {exc}", file=sys.stderr)
        exit_code = 2
    except KeyboardInterrupt:
        _cli_log.error("cli_command_error command=%s kind=interrupted", command)
        print("\n[interrupted]", file=sys.stderr)
        exit_code = 130
    except RuntimeError as exc:
        _cli_log.error(
            "cli_command_error command=%s kind=runtime error=%s", command, exc
        )
        print(f"[runtime error] {exc}", file=sys.stderr)
        exit_code = 1
    except (OSError, ValueError) as exc:
        _cli_log.error(
            "cli_command_error command=%s kind=%s error=%s",
            command,
            type(exc).__name__,
            exc,
        )
        print(f"[error] {type(exc).__name__}: {exc}", file=sys.stderr)
        exit_code = 1
    finally:
        duration_sec = time.perf_counter() - started
        _cli_log.info(
            "cli_command_end command=%s exit_code=%s duration_sec=%.3f",
            command,
            exit_code,
            duration_sec,
        )

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
