"""Unit tests for inspoclock.page."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from inspoclock.errors import ErrorCode, InspoClockError
from inspoclock.page import IMAGE_URL_PLACEHOLDER, build_clock_page, render_page

if TYPE_CHECKING:
    from pathlib import Path

URL = "https://files.catbox.moe/abcdef.png"


class TestRenderPage:
    def test_replaces_every_occurrence(self) -> None:
        template = (
            f'<meta property="og:image" content="{IMAGE_URL_PLACEHOLDER}">'
            f'<body style="background-image:url({IMAGE_URL_PLACEHOLDER})">'
        )
        html = render_page(template, URL)
        assert IMAGE_URL_PLACEHOLDER not in html
        assert html.count(URL) == 2

    def test_no_escaping(self) -> None:
        assert render_page("%%IMAGE_URL%%", "https://x/a.png?b=1&c=2") == "https://x/a.png?b=1&c=2"

    def test_template_without_placeholder_unchanged(self) -> None:
        assert render_page("<p>static</p>", URL) == "<p>static</p>"


class TestBuildClockPage:
    def test_writes_output(self, tmp_path: Path) -> None:
        template = tmp_path / "template.html"
        template.write_text("<img src='%%IMAGE_URL%%'>", encoding="utf-8")
        output = tmp_path / "site" / "index.html"

        result = build_clock_page(template, output, URL)

        assert result == output
        assert output.read_text(encoding="utf-8") == f"<img src='{URL}'>"

    def test_missing_template(self, tmp_path: Path) -> None:
        with pytest.raises(InspoClockError) as exc_info:
            build_clock_page(tmp_path / "nope.html", tmp_path / "index.html", URL)

        assert exc_info.value.code == ErrorCode.TEMPLATE_NOT_FOUND
        assert not (tmp_path / "index.html").exists()
