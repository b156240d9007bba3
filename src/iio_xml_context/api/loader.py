"""Public API for building contexts from XML descriptions.

Progressive disclosure from simple module-level functions, which return a
``Context`` or None, to the configurable ``XMLContextLoader``, which returns a
``BuildResult`` with the error and every diagnostic collected on the way.
"""

import time
from pathlib import Path
from typing import Callable, Optional, Union

from iio_xml_context.document import (
    ParsedDocument,
    parse_document_buffer,
    parse_document_file,
)
from iio_xml_context.model import BuildReporter, Context, ContextBuilder
from iio_xml_context.shared import (
    AllocationFailure,
    BuildIssue,
    BuildResult,
    ContextBuildError,
    DiagnosticSeverity,
    LoaderConfig,
    get_logger,
)

BufferType = Union[bytes, bytearray, memoryview, str]

MS_PER_SECOND = 1000


def create_xml_context(
    xml_file: Union[str, Path],
    config: Optional[LoaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Optional[Context]:
    """Build a context from an XML file.

    Returns:
        The fully built Context, or None if parsing or building failed

    Examples:
        >>> ctx = create_xml_context("board.xml")
        >>> [dev.id for dev in ctx.devices]
        ['iio:device0']
    """
    return XMLContextLoader(config, correlation_id).load_file(xml_file).context


def create_xml_context_mem(
    xml: BufferType,
    length: Optional[int] = None,
    config: Optional[LoaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Optional[Context]:
    """Build a context from an in-memory XML document.

    Args:
        xml: Document content; text is encoded as UTF-8
        length: Number of leading bytes of ``xml`` to parse (defaults to all)

    Returns:
        The fully built Context, or None if parsing or building failed

    Raises:
        TypeError: If ``xml`` is neither text nor a bytes-like buffer
        ValueError: If ``length`` is negative or larger than the buffer

    Examples:
        >>> ctx = create_xml_context_mem(b'<context><device id="dev0"/></context>')
        >>> ctx.devices[0].id
        'dev0'
    """
    return XMLContextLoader(config, correlation_id).load_buffer(xml, length).context


class XMLContextLoader:
    """Configurable loader producing detailed ``BuildResult`` objects.

    Each call parses the source, builds the context from the document root and
    releases the parsed document exactly once, whether or not the build worked.
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or LoaderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_context_loader")

    def load_file(self, xml_file: Union[str, Path]) -> BuildResult:
        """Parse and build a context from an XML file."""
        source = str(xml_file)
        return self._load(
            lambda: parse_document_file(xml_file, self.config, self.correlation_id),
            source,
        )

    def load_buffer(self, xml: BufferType, length: Optional[int] = None) -> BuildResult:
        """Parse and build a context from an in-memory XML document.

        Raises:
            TypeError: If ``xml`` is neither text nor a bytes-like buffer
            ValueError: If ``length`` is negative or larger than the buffer
        """
        if isinstance(xml, str):
            data = xml.encode("utf-8")
        elif isinstance(xml, (bytes, bytearray, memoryview)):
            data = bytes(xml)
        else:
            raise TypeError(
                f"xml must be str or a bytes-like buffer, not {type(xml).__name__}"
            )
        if length is not None:
            if length < 0 or length > len(data):
                raise ValueError(
                    f"length must be between 0 and {len(data)}, got {length}"
                )
            data = data[:length]

        return self._load(
            lambda: parse_document_buffer(data, self.config, self.correlation_id),
            "<memory>",
        )

    def _load(
        self,
        open_document: Callable[[], ParsedDocument],
        source: str,
    ) -> BuildResult:
        start_time = time.time()
        result = BuildResult(source=source, correlation_id=self.correlation_id)
        reporter = BuildReporter(
            self.correlation_id,
            warn_on_unknown=self.config.warn_on_unknown,
            diagnostics=result.diagnostics,
        )

        self.logger.info("Starting context build", extra={"source": source})

        try:
            with open_document() as document:
                for message in document.validity_errors:
                    reporter.warn(
                        "document_source",
                        f"Document is not valid against its DTD: {message}",
                        BuildIssue.DTD_INVALID,
                        source=source,
                    )
                context = ContextBuilder(reporter).build(document.root)
        except ContextBuildError as e:
            self._record_failure(result, e)
        except MemoryError as e:
            failure = AllocationFailure(f"Unable to allocate memory while loading {source}")
            failure.__cause__ = e
            self._record_failure(result, failure)
        else:
            result.context = context
            result.success = True

        result.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self.logger.info(
            "Context build finished",
            extra={
                "source": source,
                "success": result.success,
                "device_count": len(result.context.devices) if result.context else 0,
                "warning_count": len(result.warnings),
                "processing_time_ms": result.processing_time_ms,
            },
        )
        return result

    def _record_failure(self, result: BuildResult, error: ContextBuildError) -> None:
        result.context = None
        result.success = False
        result.error = error
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            error.message,
            "xml_context_loader",
            issue=error.issue,
            details={"element": error.element, "field": error.field_name},
        )
        self.logger.error(
            "Context build failed",
            extra={"source": result.source, "issue": error.issue.name, "error": error.message},
        )
