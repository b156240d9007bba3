"""Tests for the lxml-backed document source."""

from pathlib import Path

import pytest

from iio_xml_context.document import (
    ParsedDocument,
    parse_document_buffer,
    parse_document_file,
)
from iio_xml_context.shared import LoaderConfig, MalformedDocument

DOCUMENT = b'<?xml version="1.0"?><context><!-- board --><device id="d"/></context>'
EMPTY_CONTEXT_DTD = b"<!DOCTYPE context [<!ELEMENT context EMPTY>]>"


class TestParseDocumentBuffer:
    """Test parsing of in-memory documents."""

    def test_returns_document_with_root(self) -> None:
        """Test that a buffer parses into a document exposing its root."""
        document = parse_document_buffer(DOCUMENT)

        assert isinstance(document, ParsedDocument)
        assert document.root.tag == "context"
        assert document.source == "<memory>"
        assert not document.is_released

    def test_syntax_error_is_malformed(self) -> None:
        """Test that a well-formedness error raises MalformedDocument."""
        with pytest.raises(MalformedDocument, match="Unable to parse XML buffer"):
            parse_document_buffer(b"<context><device></context>")

    def test_size_limit(self) -> None:
        """Test that input over the configured size is rejected."""
        with pytest.raises(MalformedDocument, match="byte limit"):
            parse_document_buffer(DOCUMENT, LoaderConfig(max_input_size_bytes=10))

    def test_doctype_exposed(self) -> None:
        """Test that the DOCTYPE declaration is exposed."""
        document = parse_document_buffer(b"<!DOCTYPE context><context/>", LoaderConfig.lenient())

        assert document.doctype == "<!DOCTYPE context>"

    def test_valid_document_has_no_validity_errors(self) -> None:
        """Test that a document matching its DTD reports no validity errors."""
        document = parse_document_buffer(EMPTY_CONTEXT_DTD + b"<context/>")

        assert document.root.tag == "context"
        assert document.validity_errors == []

    def test_dtd_validity_errors_are_collected(self) -> None:
        """Test that DTD validity errors are kept on the document instead of raised."""
        document = parse_document_buffer(EMPTY_CONTEXT_DTD + b"<context><device/></context>")

        assert document.root.tag == "context"
        assert len(document.validity_errors) >= 1
        assert all(message.startswith("line ") for message in document.validity_errors)

    def test_dtd_validity_errors_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that DTD validity errors are logged as warnings."""
        with caplog.at_level("WARNING", logger="iio_xml_context"):
            parse_document_buffer(EMPTY_CONTEXT_DTD + b"<context><device/></context>")

        assert "not valid against its DTD" in caplog.text

    def test_dtd_validity_errors_fatal_when_configured(self) -> None:
        """Test that dtd_errors_fatal turns validity errors into MalformedDocument."""
        config = LoaderConfig(dtd_errors_fatal=True)

        with pytest.raises(MalformedDocument, match="not valid against its DTD"):
            parse_document_buffer(EMPTY_CONTEXT_DTD + b"<context><device/></context>", config)

    def test_validation_disabled_collects_nothing(self) -> None:
        """Test that no validity errors are collected when validation is off."""
        document = parse_document_buffer(
            EMPTY_CONTEXT_DTD + b"<context><device/></context>", LoaderConfig.lenient()
        )

        assert document.validity_errors == []


class TestParseDocumentFile:
    """Test parsing of documents on disk."""

    def test_parses_file(self, tmp_path: Path) -> None:
        """Test parsing a document from disk."""
        path = tmp_path / "ctx.xml"
        path.write_bytes(DOCUMENT)

        document = parse_document_file(path)

        assert document.root.tag == "context"
        assert document.source == str(path)

    def test_missing_file_is_malformed(self, tmp_path: Path) -> None:
        """Test that a missing file raises MalformedDocument."""
        with pytest.raises(MalformedDocument, match="Unable to parse XML file"):
            parse_document_file(tmp_path / "nope.xml")

    def test_broken_file_is_malformed(self, tmp_path: Path) -> None:
        """Test that a truncated file raises MalformedDocument."""
        path = tmp_path / "broken.xml"
        path.write_text("<context>", encoding="utf-8")

        with pytest.raises(MalformedDocument):
            parse_document_file(path)


class TestParsedDocumentRelease:
    """Test release semantics of parsed documents."""

    def test_context_manager_releases(self) -> None:
        """Test that leaving the with block releases the document."""
        with parse_document_buffer(DOCUMENT) as document:
            assert document.root.tag == "context"

        assert document.is_released
        assert document.doctype == ""

    def test_root_after_release_raises(self) -> None:
        """Test that the root is unavailable after release."""
        document = parse_document_buffer(DOCUMENT)
        document.release()

        with pytest.raises(RuntimeError, match="already been released"):
            document.root

    def test_double_release_raises(self) -> None:
        """Test that releasing twice is an error."""
        document = parse_document_buffer(DOCUMENT)
        document.release()

        with pytest.raises(RuntimeError):
            document.release()
