"""lxml-backed document parsing for context descriptions.

The parser is created per call from a ``LoaderConfig``. lxml keeps no
process-wide init/cleanup state that callers must pair up, and parser objects
are never shared between calls, so concurrent loads need no serialization here.
"""

import io
from pathlib import Path
from typing import Any, List, Optional, Union

from lxml import etree

from iio_xml_context.shared import LoaderConfig, MalformedDocument, get_logger

PathLike = Union[str, Path]


class ParsedDocument:
    """Parsed document tree owned by a single load operation.

    The tree must be released exactly once; using the document as a context
    manager guarantees that regardless of how the body exits.
    ``validity_errors`` holds DTD validity messages; they do not stop a build.
    """

    def __init__(
        self, tree: Any, source: str, validity_errors: Optional[List[str]] = None
    ) -> None:
        self._tree = tree
        self.source = source
        self.validity_errors: List[str] = list(validity_errors or [])

    def __enter__(self) -> "ParsedDocument":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.release()

    @property
    def is_released(self) -> bool:
        return self._tree is None

    @property
    def root(self) -> Any:
        """Root element of the document."""
        if self._tree is None:
            raise RuntimeError(f"Document {self.source} has already been released")
        return self._tree.getroot()

    @property
    def doctype(self) -> str:
        if self._tree is None:
            return ""
        return self._tree.docinfo.doctype

    def release(self) -> None:
        """Drop the parsed tree."""
        if self._tree is None:
            raise RuntimeError(f"Document {self.source} has already been released")
        self._tree = None


def _create_parser(config: LoaderConfig) -> Any:
    # DTD validation is applied after parsing, and only when the document
    # declares a DTD; lxml's own dtd_validation rejects DOCTYPE-less input.
    return etree.XMLParser(
        load_dtd=config.load_dtd,
        dtd_validation=False,
        no_network=config.no_network,
        resolve_entities=config.resolve_entities,
        huge_tree=config.huge_tree,
    )


def _validate_declared_dtd(
    tree: Any, config: LoaderConfig, source: str, logger: Any
) -> List[str]:
    """Validate against the declared DTD and return the validity messages.

    Only a well-formedness failure stops a load; validity errors are reported
    unless ``dtd_errors_fatal`` is set.
    """
    if not config.dtd_validation:
        return []

    docinfo = tree.docinfo
    errors: List[str] = []
    for dtd in (docinfo.internalDTD, docinfo.externalDTD):
        if dtd is None or dtd.validate(tree):
            continue
        errors.extend(f"line {entry.line}: {entry.message}" for entry in dtd.error_log)

    if errors and config.dtd_errors_fatal:
        raise MalformedDocument(
            f"Document {source} is not valid against its DTD: {errors[0]}",
            element=docinfo.root_name,
        )
    for message in errors:
        logger.warning(
            "Document is not valid against its DTD",
            extra={"source": source, "error": message},
        )
    return errors


def _check_size(size: int, config: LoaderConfig, source: str) -> None:
    limit = config.max_input_size_bytes
    if limit is not None and size > limit:
        raise MalformedDocument(
            f"Document {source} is {size} bytes, exceeding the {limit} byte limit"
        )


def parse_document_file(
    path: PathLike,
    config: Optional[LoaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParsedDocument:
    """Parse an XML file into a ``ParsedDocument``.

    Raises:
        MalformedDocument: If the file cannot be read or is not well-formed
    """
    config = config or LoaderConfig()
    logger = get_logger(__name__, correlation_id, "document_source")
    path_obj = Path(path)
    source = str(path_obj)

    try:
        _check_size(path_obj.stat().st_size, config, source)
        tree = etree.parse(source, _create_parser(config))
    except (etree.XMLSyntaxError, OSError) as e:
        logger.error("Unable to parse XML file", extra={"file_path": source, "error": str(e)})
        raise MalformedDocument(f"Unable to parse XML file {source}: {e}") from e

    validity_errors = _validate_declared_dtd(tree, config, source, logger)
    logger.debug("Parsed XML file", extra={"file_path": source})
    return ParsedDocument(tree, source, validity_errors)


def parse_document_buffer(
    data: bytes,
    config: Optional[LoaderConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParsedDocument:
    """Parse an in-memory XML document into a ``ParsedDocument``.

    Raises:
        MalformedDocument: If the buffer is not well-formed
    """
    config = config or LoaderConfig()
    logger = get_logger(__name__, correlation_id, "document_source")
    source = "<memory>"

    _check_size(len(data), config, source)
    try:
        tree = etree.parse(io.BytesIO(data), _create_parser(config))
    except etree.XMLSyntaxError as e:
        logger.error("Unable to parse XML buffer", extra={"content_length": len(data), "error": str(e)})
        raise MalformedDocument(f"Unable to parse XML buffer: {e}") from e

    validity_errors = _validate_declared_dtd(tree, config, source, logger)
    logger.debug("Parsed XML buffer", extra={"content_length": len(data)})
    return ParsedDocument(tree, source, validity_errors)
