"""Unit tests for the streaming manifest filter."""

import io
from collections.abc import Callable

import pytest

from clean_recently_used.exceptions import (
    MalformedXmlError,
    MissingOrAmbiguousHrefError,
    StructuralAssumptionViolatedError,
    UnrecognizedSchemeError,
)
from clean_recently_used.xbel.classifier import PathPrefixSet
from clean_recently_used.xbel.stream_filter import FilterReport, filter_stream


def run_filter(data: bytes, prefixes: list[str], chunk_size: int = 64 * 1024) -> bytes:
    sink = io.BytesIO()
    filter_stream(io.BytesIO(data), sink, prefixes, chunk_size)
    return sink.getvalue()


class TestNoMatch:
    """Test that unmatched manifests are reproduced exactly."""

    def test_empty_prefix_set_is_identity(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that no prefixes leave the manifest byte-for-byte identical."""
        data = make_xbel("file:///home/me/A-File.txt")

        assert run_filter(data, []) == data

    def test_non_matching_prefixes_are_identity(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that prefixes matching nothing leave the manifest identical."""
        data = make_xbel("file:///home/me/A-File.txt", "file:///tmp/x")

        assert run_filter(data, ["/srv", "/var"]) == data

    def test_other_protocols_pass_through(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that trash, mtp, ftp and sftp bookmarks are always kept."""
        data = make_xbel(
            "trash:///A-File.txt",
            "mtp://phone_model/Path/To/File.txt",
            "ftp://user@host/Path/To/File",
            "sftp://user@host/Path/To/File",
        )

        assert run_filter(data, ["/", "trash", "/Path"]) == data

    def test_quirky_formatting_is_preserved(self) -> None:
        """Test that quoting, entities, comments and CRLF survive untouched."""
        data = (
            b"<?xml version='1.0' encoding='UTF-8'?>\r\n"
            b"<!-- kept -->\r\n"
            b"<xbel version='1.0'>\r\n"
            b"  <bookmark added=\"1\"   href='file:///home/me/x&amp;y' >"
            b"<title>a &lt; b</title></bookmark>\r\n"
            b"</xbel>\r\n"
        )

        assert run_filter(data, ["/home/a"]) == data


class TestRemoval:
    """Test removal of matching bookmarks."""

    def test_filter_two_keeps_the_third(self, make_xbel: Callable[..., bytes]) -> None:
        """Test removal of /home/a and /home/b, keeping /home/me."""
        data = make_xbel(
            "file:///home/a/A-File.txt",
            "file:///home/b/A-File.txt",
            "file:///home/me/A-File.txt",
        )

        output = run_filter(data, ["/home/a", "/home/b"])

        assert output == make_xbel("file:///home/me/A-File.txt")
        assert output.startswith(b'<?xml version="1.0" encoding="UTF-8"?>\n<xbel version="1.0"')

    def test_filter_one(self, make_xbel: Callable[..., bytes]) -> None:
        """Test removal of a single bookmark under /tmp."""
        data = make_xbel("file:///tmp/A-File.txt", "file:///home/me/A-File.txt")

        assert run_filter(data, ["/tmp"]) == make_xbel("file:///home/me/A-File.txt")

    def test_scattered_matches_keep_order(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that survivors keep their original order."""
        data = make_xbel(
            "file:///keep/1",
            "file:///drop/1",
            "trash:///keep-2",
            "file:///drop/2",
            "file:///keep/3",
        )

        output = run_filter(data, ["/drop"])

        assert output == make_xbel("file:///keep/1", "trash:///keep-2", "file:///keep/3")

    def test_percent_encoded_path_matches(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that hrefs are percent-decoded before matching."""
        data = make_xbel("file:///opt/A%20Directory/A-File.txt", "file:///home/me/A-File.txt")

        output = run_filter(data, ["/opt/A Directory"])

        assert output == make_xbel("file:///home/me/A-File.txt")

    def test_prefix_match_is_not_segment_aware(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that /home/a removes /home/abc as well."""
        data = make_xbel("file:///home/abc/file.txt", "file:///home/me/A-File.txt")

        output = run_filter(data, ["/home/a"])

        assert output == make_xbel("file:///home/me/A-File.txt")

    def test_invalid_utf8_does_not_abort(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that a bad escaped byte in one href leaves siblings filterable."""
        data = make_xbel(
            "file:///opt/A%20Directory/A-File.txt%BC",
            "file:///opt/Another%20Directory/Another-File.txt%BC",
        )

        output = run_filter(data, ["/opt/A Directory"])

        assert output == make_xbel("file:///opt/Another%20Directory/Another-File.txt%BC")

    def test_character_reference_in_href_matches(self) -> None:
        """Test that &#233; in an href matches a prefix spelled with é."""
        data = (
            b"<xbel>\n"
            b'  <bookmark href="file:///caf&#233;/x"></bookmark>\n'
            b'  <bookmark href="file:///home/me/y"></bookmark>\n'
            b"</xbel>"
        )

        output = run_filter(data, ["/café"])

        assert output == b'<xbel>\n  <bookmark href="file:///home/me/y"></bookmark>\n</xbel>'

    def test_whitespace_reference_after_removal_is_swallowed(self) -> None:
        """Test that a no-break space reference counts as whitespace."""
        data = b'<xbel>\n  <bookmark href="file:///a/x"></bookmark>&#160;\n</xbel>'

        assert run_filter(data, ["/a"]) == b"<xbel>\n  </xbel>"

    @pytest.mark.parametrize(
        ("prefix", "removed"),
        [("/home/a&b", 1), ("/home/a&amp;b", 0)],
    )
    def test_entities_in_href_are_resolved_before_matching(
        self, make_xbel: Callable[..., bytes], prefix: str, removed: int
    ) -> None:
        """Test that prefixes match the unescaped href, not its markup."""
        data = make_xbel("file:///home/a&amp;b/x")

        report = filter_stream(io.BytesIO(data), io.BytesIO(), [prefix])

        assert report.removed == removed

    def test_removing_last_bookmark_keeps_preceding_indentation(
        self, make_xbel: Callable[..., bytes]
    ) -> None:
        """Test that only the text after the removed bookmark is swallowed."""
        data = make_xbel("file:///home/me/A-File.txt", "file:///home/a/A-File.txt")

        output = run_filter(data, ["/home/a"])

        expected = make_xbel("file:///home/me/A-File.txt").replace(b"</xbel>", b"  </xbel>")
        assert output == expected

    def test_removing_everything_leaves_root(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that removing every bookmark leaves the declaration and root."""
        data = make_xbel("file:///home/a/1", "file:///home/a/2")

        output = run_filter(data, ["/home/a"])

        assert output.startswith(b'<?xml version="1.0" encoding="UTF-8"?>')
        assert b"<bookmark " not in output
        assert output.endswith(b">\n  </xbel>\n")

    def test_adjacent_bookmarks_without_whitespace(self) -> None:
        """Test back-to-back removals with no text between them."""
        data = (
            b'<xbel><bookmark href="file:///a/1"></bookmark>'
            b'<bookmark href="file:///a/2"></bookmark>\n</xbel>'
        )

        assert run_filter(data, ["/a"]) == b"<xbel></xbel>"

    @pytest.mark.parametrize("chunk_size", [1, 5, 100])
    def test_small_chunks_give_same_result(
        self, make_xbel: Callable[..., bytes], chunk_size: int
    ) -> None:
        """Test that the result does not depend on how the input is chunked."""
        data = make_xbel("file:///home/a/x", "file:///home/me/y", "file:///home/b/z")

        output = run_filter(data, ["/home/a", "/home/b"], chunk_size)

        assert output == run_filter(data, ["/home/a", "/home/b"])

    def test_report_counts(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that the report counts kept and removed bookmarks."""
        data = make_xbel("file:///home/a/1", "trash:///2", "file:///home/me/3")

        report = filter_stream(io.BytesIO(data), io.BytesIO(), ["/home/a"])

        assert report == FilterReport(kept=2, removed=1)

    def test_accepts_prefix_set(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that a PathPrefixSet can be passed directly."""
        data = make_xbel("file:///home/a/1", "file:///home/me/3")

        report = filter_stream(io.BytesIO(data), io.BytesIO(), PathPrefixSet(["/home/a"]))

        assert report.removed == 1


class TestFailures:
    """Test fatal conditions."""

    def test_unrecognized_scheme_fails(self, make_xbel: Callable[..., bytes]) -> None:
        """Test that http:// bookmarks abort the pass."""
        data = make_xbel("file:///home/me/x", "http://example.com/page")

        with pytest.raises(UnrecognizedSchemeError) as exc_info:
            run_filter(data, [])

        assert exc_info.value.href == "http://example.com/page"

    def test_bookmark_without_href_fails(self) -> None:
        """Test that a bookmark without href aborts the pass."""
        data = b'<xbel><bookmark added="1"></bookmark></xbel>'

        with pytest.raises(MissingOrAmbiguousHrefError):
            run_filter(data, [])

    def test_text_after_removed_bookmark_fails(self) -> None:
        """Test that non-whitespace after a removal aborts the pass."""
        data = b'<xbel>\n  <bookmark href="file:///tmp/x"></bookmark>oops\n</xbel>'

        with pytest.raises(StructuralAssumptionViolatedError):
            run_filter(data, ["/tmp"])

    def test_malformed_xml_fails(self) -> None:
        """Test that broken markup aborts the pass."""
        data = b'<xbel><bookmark href="file:///tmp/x"></xbel>'

        with pytest.raises(MalformedXmlError):
            run_filter(data, [])
