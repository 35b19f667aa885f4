from __future__ import annotations

import difflib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence


def _markers(numbers: Sequence[int], open_: str, close: str) -> list[str]:
    return [f"{open_}{number}{close}" for number in numbers]


def unified_marker_diff(footnotes: Sequence[str], references: Sequence[str]) -> str:
    """
    Unified diff of two marker lists, one marker per line.
    """
    lines = difflib.unified_diff(
        list(footnotes),
        list(references),
        fromfile="footnotes",
        tofile="references",
        lineterm="",
    )
    return "\n".join(lines)


@dataclass
class FootnoteMismatch:
    """
    Report for a pass whose references and footnotes do not add up.
    """

    kind: str
    references: int
    footnotes: int
    references_found: str
    footnotes_found: str
    differences: str
    source: Optional[str] = None

    @classmethod
    def from_found(
        cls,
        *,
        kind: str,
        open_: str,
        close: str,
        references: int,
        footnotes: int,
        references_found: Sequence[int],
        footnotes_found: Sequence[int],
    ) -> "FootnoteMismatch":
        ref_markers = _markers(references_found, open_, close)
        fn_markers = _markers(footnotes_found, open_, close)
        return cls(
            kind=kind,
            references=references,
            footnotes=footnotes,
            references_found=" ".join(ref_markers),
            footnotes_found=" ".join(fn_markers),
            differences=unified_marker_diff(fn_markers, ref_markers),
        )

    def summary(self) -> str:
        return (
            f"{self.kind} footnotes mismatch: "
            f"{self.references} references vs {self.footnotes} footnotes"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "references": self.references,
            "footnotes": self.footnotes,
            "references_found": self.references_found,
            "footnotes_found": self.footnotes_found,
            "differences": self.differences,
            "source": self.source,
        }


class FootnoteMismatchError(Exception):
    """Raised when a footnote pass refuses to rewrite a document."""

    def __init__(self, mismatch: FootnoteMismatch) -> None:
        super().__init__(mismatch.summary())
        self.mismatch = mismatch


def write_mismatch_log(mismatch: FootnoteMismatch, directory: str | Path) -> Path:
    """
    Append the report as JSONL into <directory>/footnotes-YYYY-MM-DD.jsonl.
    """

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc)
    log_path = out_dir / f"footnotes-{ts:%Y-%m-%d}.jsonl"
    payload = mismatch.to_dict()
    payload["timestamp_utc"] = ts.isoformat()

    with log_path.open("a", encoding="utf-8") as fp:
        fp.write(json.dumps(payload, ensure_ascii=False) + "\n")

    return log_path
