"""Clock page rendering from template.html."""

from __future__ import annotations

from pathlib import Path

import structlog

from inspoclock.errors import ErrorCode, InspoClockError

log = structlog.get_logger()

IMAGE_URL_PLACEHOLDER = "%%IMAGE_URL%%"


def render_page(template: str, url: str) -> str:
    """Replace every placeholder with ``url``. No escaping is applied."""
    return template.replace(IMAGE_URL_PLACEHOLDER, url)


def build_clock_page(template_path: Path, output_path: Path, url: str) -> Path:
    """Render ``template_path`` with ``url`` and write it to ``output_path``."""
    try:
        template = template_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise InspoClockError(
            code=ErrorCode.TEMPLATE_NOT_FOUND,
            message=f"Page template not found: {template_path}",
            suggestion="Run from the site directory or set INSPOCLOCK__SITE__TEMPLATE_PATH.",
        ) from exc

    if IMAGE_URL_PLACEHOLDER not in template:
        log.warning("page_template_without_placeholder", path=str(template_path))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_page(template, url), encoding="utf-8")
    log.info("page_built", path=str(output_path), url=url)
    return output_path
