from __future__ import annotations

import datetime as dt
from pathlib import Path

from permsift.models import ConfigError


def utc_now_iso() -> str:
    return (
        dt.datetime.now(dt.timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def read_text_lines(path: Path) -> list[str]:
    with path.open("r", encoding="utf-8") as handle:
        lines = [line.rstrip("\n") for line in handle]
    return [line for line in lines if line.strip() and not line.strip().startswith("#")]


def read_tokens_file(path: str | Path) -> list[str]:
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise ConfigError(f"Tokens file not found: {resolved}")
    return [line.strip() for line in read_text_lines(resolved)]
