"""Recovery of a content table from its own HTML projection."""

import json
import logging
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from models import CONTENT_TABLE_TYPE, CONTENT_TABLE_VERSION
from .renderers import EMBEDDED_JSON_ELEMENT_ID

logger = logging.getLogger('content_table_export.content_table.html_transform')


def _find_payload(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, 'lxml')
    script = soup.find('script', id=EMBEDDED_JSON_ELEMENT_ID, attrs={'type': 'application/json'})
    if script is None:
        return None
    return script.string or script.get_text()


def has_embedded_table(html: str) -> bool:
    """Check whether HTML carries an embedded content table payload."""
    if not html:
        return False
    return _find_payload(html) is not None


def extract_from_html(html: str) -> Optional[Dict[str, Any]]:
    """
    Extract the embedded content table from HTML.

    Looks for ``<script type="application/json" id="universal-content-json">``
    and accepts its payload only if it decodes to an object with the expected
    ``type`` and ``version``.

    Args:
        html: Any HTML, typically pasted from the clipboard

    Returns:
        Table dictionary, or None if absent or malformed
    """
    if not html:
        return None

    payload = _find_payload(html)
    if not payload or not payload.strip():
        logger.debug("No embedded content table found in HTML")
        return None

    try:
        data = json.loads(payload.strip())
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse embedded content table JSON: {e}")
        return None

    if not isinstance(data, dict):
        logger.debug("Embedded content table JSON is not an object")
        return None

    version = data.get('version')
    if data.get('type') != CONTENT_TABLE_TYPE or isinstance(version, bool) or version != CONTENT_TABLE_VERSION:
        logger.debug(
            f"Embedded JSON is not a v{CONTENT_TABLE_VERSION} content table "
            f"(type={data.get('type')!r}, version={version!r})"
        )
        return None

    return data


__all__ = ['extract_from_html', 'has_embedded_table']
