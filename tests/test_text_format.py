from __future__ import annotations

import json

from hackjudge.util.text_format import clean_markdown, flatten_ocr_response


def test_clean_markdown_strips_images_links_and_markers():
    md = "# FireWatch\n![logo](img-0.png)\nSee **our** [site](https://example.com) and `code`."
    assert clean_markdown(md) == "FireWatch\n\nSee our site and code."


def test_flatten_ocr_response_reads_pages_blocks_and_tables():
    ocr = {
        "pages": [
            {"index": 0, "markdown": "## Problem\nWildfires spread *fast*."},
            {"text": "Plain page text", "blocks": [{"markdown": "**Team**"}, {"text": "Block text"}]},
        ],
        "tables": [{"headers": ["Cost", "Value"], "data": [["10", "20"]]}],
    }
    text = flatten_ocr_response(ocr)

    assert "--- Page 1 ---\nProblem\nWildfires spread fast." in text
    assert "--- Page 2 ---\nPlain page text" in text
    assert "Team" in text and "**" not in text
    assert "Block text" in text
    assert "--- Table 1 ---\nCost | Value\n10 | 20" in text


def test_flatten_ocr_response_falls_back_to_json_dump():
    ocr = {"pages": [{"images": []}], "model": "mistral-ocr-latest"}
    assert flatten_ocr_response(ocr) == json.dumps(ocr, ensure_ascii=False)
