"""
Text flattening for OCR output.

Mistral OCR returns Markdown per page (and, on some models, per block plus
extracted tables). The summarizer wants plain prose, so images are dropped,
links keep only their label and emphasis/heading/code markers are stripped.
"""

from __future__ import annotations

import json
import re
from typing import Any

_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_HEADING_RE = re.compile(r"#{1,6}\s+")


def clean_markdown(markdown_text: str) -> str:
    s = _IMAGE_RE.sub("", markdown_text)
    s = _LINK_RE.sub(r"\1", s)
    s = _HEADING_RE.sub("", s)
    s = s.replace("**", "").replace("*", "").replace("`", "")
    return s.strip()


def _table_to_text(table: dict[str, Any]) -> str:
    lines: list[str] = []
    headers = table.get("headers")
    if isinstance(headers, list):
        lines.append(" | ".join(str(h) for h in headers))
    rows = table.get("data")
    if isinstance(rows, list):
        for row in rows:
            if isinstance(row, list):
                lines.append(" | ".join(str(c) for c in row))
    return "\n".join(lines)


def flatten_ocr_response(ocr: dict[str, Any]) -> str:
    """
    Concatenate every text-bearing part of an OCR response into one string.

    Falls back to the JSON dump of the whole response when nothing textual
    was found, so the summarizer always has something to work with.
    """
    parts: list[str] = []

    text = ocr.get("text")
    if isinstance(text, str) and text.strip():
        parts.append(text + "\n")

    pages = ocr.get("pages")
    if isinstance(pages, list):
        for index, page in enumerate(pages):
            if not isinstance(page, dict):
                continue
            if page.get("text"):
                parts.append(f"--- Page {index + 1} ---\n{page['text']}\n")
            if page.get("markdown"):
                cleaned = clean_markdown(str(page["markdown"]))
                if cleaned:
                    parts.append(f"--- Page {index + 1} ---\n{cleaned}\n")
            for block in page.get("blocks") or []:
                if not isinstance(block, dict):
                    continue
                if block.get("markdown"):
                    cleaned = clean_markdown(str(block["markdown"]))
                    if cleaned:
                        parts.append(cleaned)
                if block.get("text"):
                    parts.append(str(block["text"]))

    tables = ocr.get("tables")
    if isinstance(tables, list):
        for index, table in enumerate(tables):
            if isinstance(table, dict):
                parts.append(f"--- Table {index + 1} ---\n{_table_to_text(table)}\n")

    flattened = "\n".join(parts).strip()
    return flattened or json.dumps(ocr, ensure_ascii=False)
