"""Shared XBEL documents for unit tests."""

from collections.abc import Callable

import pytest

XBEL_HEADER = """<?xml version="1.0" encoding="UTF-8"?>
<xbel version="1.0"
      xmlns:bookmark="http://www.freedesktop.org/standards/desktop-bookmarks"
      xmlns:mime="http://www.freedesktop.org/standards/shared-mime-info"
>
"""

XBEL_FOOTER = "</xbel>\n"


def bookmark_block(href: str, mime_type: str = "text/plain") -> str:
    """Render one bookmark the way GTK writes it, indented and newline terminated."""
    return f"""  <bookmark href="{href}" added="2020-09-24T20:00:00Z" modified="2020-09-25T20:00:00Z" visited="2020-09-25T20:00:00Z">
    <info>
      <metadata owner="http://freedesktop.org">
        <mime:mime-type type="{mime_type}"/>
        <bookmark:groups>
          <bookmark:group>gedit</bookmark:group>
        </bookmark:groups>
        <bookmark:applications>
          <bookmark:application name="gedit" exec="&apos;gedit %u&apos;" modified="2020-09-25T20:00:00Z" count="1234"/>
        </bookmark:applications>
      </metadata>
    </info>
  </bookmark>
"""


def xbel_document(*hrefs: str) -> bytes:
    """Build a complete manifest holding one bookmark per href."""
    body = "".join(bookmark_block(href) for href in hrefs)
    return (XBEL_HEADER + body + XBEL_FOOTER).encode("utf-8")


@pytest.fixture
def make_xbel() -> Callable[..., bytes]:
    """Provide the manifest builder."""
    return xbel_document
