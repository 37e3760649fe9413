"""
Read a raw ADIZ dataset from disk.

Supported inputs:
- .json            -> the dataset object itself
- .html / .htm     -> a page embedding `const DATA = {...};` (JSON-compatible literal)
"""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Union

__all__ = ["read_dataset_file", "extract_embedded_data"]

_DATA_RE = re.compile(r"const\s+DATA\s*=\s*(\{[\s\S]*?\});")


def extract_embedded_data(html: str) -> Dict[str, Any]:
    """
    Pull the `const DATA = {...};` object out of an HTML page.
    Raises ValueError if no JSON-compatible DATA object is found.
    """
    for m in _DATA_RE.finditer(html):
        try:
            return json.loads(m.group(1))
        except json.JSONDecodeError:
            # Lazy match stopped at an inner '};'; the fallback below widens it
            continue

    start = html.find("const DATA")
    if start != -1:
        brace = html.find("{", start)
        end = html.rfind("};")
        if brace != -1 and end > brace:
            try:
                return json.loads(html[brace : end + 1])
            except json.JSONDecodeError:
                pass
    raise ValueError("Could not find DATA object in file")


def read_dataset_file(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Dataset file not found: {p}")

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".html", ".htm"):
        return extract_embedded_data(text)
    return json.loads(text)
