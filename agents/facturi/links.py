"""Encode generated XML documents as browser download anchors."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from hashlib import md5
from urllib.parse import quote

DATA_URI_PREFIX = "data:application/xml;charset=utf-8,"
LINK_CSS_CLASSES = "btn btn-primary btn-sm pl-4 pr-4 mb-2"
DEFAULT_FILE_CODE = "45858226"


def content_hash(xml_string: str) -> str:
    """MD5 of the PHP-serialized string form (``s:<bytes>:"<value>";``).

    Keeps filenames identical to the ones produced by earlier exports.
    """

    encoded = xml_string.encode("utf-8")
    serialized = b's:%d:"' % len(encoded) + encoded + b'";'
    return md5(serialized).hexdigest()


def build_filename(xml_string: str, today: date, file_code: str = DEFAULT_FILE_CODE) -> str:
    return f"F_{file_code}_{content_hash(xml_string)}_{today.strftime('%d-%m-%Y')}.xml"


def encode_data_uri(xml_string: str) -> str:
    # RFC 3986 unreserved characters stay literal, everything else is escaped
    return DATA_URI_PREFIX + quote(xml_string, safe="")


def build_download_link(xml_string: str, today: date, file_code: str = DEFAULT_FILE_CODE) -> str:
    filename = build_filename(xml_string, today, file_code)
    return (
        f'<a href="{encode_data_uri(xml_string)}" download="{filename}" '
        f"class='{LINK_CSS_CLASSES}'>Download {filename}</a>"
    )


def make_links(
    xml_docs: Iterable[str],
    *,
    today: date | None = None,
    file_code: str = DEFAULT_FILE_CODE,
) -> list[str]:
    """One anchor tag per document, in input order."""

    today = today or date.today()
    return [build_download_link(doc, today, file_code) for doc in xml_docs]
