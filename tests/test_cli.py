from __future__ import annotations

import json
from pathlib import Path

from permsift.cli import main


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content.strip() + "\n", encoding="utf-8")


def test_estimate_json(capsys) -> None:
    assert main(["estimate", "5", "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"n": 5, "terms": [5, 20, 60, 120, 120], "total": 325}


def test_estimate_table(capsys) -> None:
    assert main(["estimate", "3"]) == 0
    out = capsys.readouterr().out
    assert "total" in out
    assert "15" in out


def test_estimate_rejects_non_positive_count(capsys) -> None:
    assert main(["estimate", "0"]) == 2
    err = capsys.readouterr().err
    assert "[invalid argument]" in err
    assert "positive integer" in err


def test_search_with_cli_tokens_json(capsys) -> None:
    code = main(["search", "--token", "ab", "--token", "ba", "--format", "json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["matches"] == ["abba", "baab"]
    assert payload["tokens"] == ["ab", "ba"]
    assert payload["predicate"] == "palindrome"
    assert payload["stats"]["items_checked"] == 4
    assert payload["estimated_count"] == 4
    assert payload["diagnostics"] == []


def test_search_defaults_to_dwarf_names(capsys) -> None:
    assert main(["search", "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["tokens"] == ["Gimli", "Fili", "Ilif", "Ilmig", "Mark"]
    assert "GimliIlmig" in payload["matches"]
    assert "FiliIlif" in payload["matches"]
    assert payload["stats"]["items_checked"] == 325


def test_search_reports_diagnostics_in_json(capsys) -> None:
    code = main(
        [
            "search",
            "--token",
            "a",
            "--token",
            "b",
            "--token",
            "c",
            "--predicate",
            "all",
            "--warn-input-size",
            "2",
            "--warn-result-count",
            "3",
            "--format",
            "json",
        ]
    )
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["matches"]) == 15
    assert payload["thresholds"]["input_size"] == 2
    events = [line.split(" ", 1)[0] for line in payload["diagnostics"]]
    assert events[0] == "search_preflight"
    assert "search_result_growth" in events
    assert events[-1] == "search_checked"


def test_search_uses_settings_and_tokens_file(tmp_path: Path, capsys) -> None:
    settings = tmp_path / "settings.yaml"
    _write(
        settings,
        """
tokens: [x, y]
predicate: all
thresholds:
  result_count: 100
""",
    )
    assert main(["search", "--settings", str(settings), "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["matches"] == ["x", "xy", "y", "yx"]

    tokens_file = tmp_path / "tokens.txt"
    _write(tokens_file, "# override\nab\nba")
    code = main(
        [
            "search",
            "--settings",
            str(settings),
            "--tokens-file",
            str(tokens_file),
            "--predicate",
            "palindrome",
            "--format",
            "json",
        ]
    )
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["tokens"] == ["ab", "ba"]
    assert payload["matches"] == ["abba", "baab"]


def test_search_table_without_matches(capsys) -> None:
    assert main(["search", "--token", "ab"]) == 0
    out = capsys.readouterr().out
    assert "Search Summary" in out
    assert "No palindromes were found" in out


def test_search_table_lists_matches(capsys) -> None:
    assert main(["search", "--token", "ab", "--token", "ba"]) == 0
    out = capsys.readouterr().out
    assert "Matches" in out
    assert "abba" in out
    assert "baab" in out


def test_search_table_prints_bracketed_tokens_verbatim(capsys) -> None:
    assert main(["search", "--token", "[/x]", "--predicate", "all"]) == 0
    out = capsys.readouterr().out
    assert "[/x]" in out

    assert main(["search", "--token", "[red]", "--predicate", "all"]) == 0
    out = capsys.readouterr().out
    assert out.count("[red]") >= 2


def test_search_unknown_predicate_is_config_error(capsys) -> None:
    assert main(["search", "--predicate", "anagram"]) == 2
    assert "[config error] Unknown predicate 'anagram'" in capsys.readouterr().err


def test_search_negative_threshold_is_config_error(capsys) -> None:
    assert main(["search", "--warn-elapsed-ms", "-5"]) == 2
    assert "must be >= 0" in capsys.readouterr().err


def test_predicates_listing(capsys) -> None:
    assert main(["predicates"]) == 0
    out = capsys.readouterr().out
    assert "palindrome" in out
    assert "all" in out
