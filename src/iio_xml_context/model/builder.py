"""Recursive construction of the context object graph from a parsed document.

Each builder works on one element of an already parsed document tree and either
returns a fully formed object or raises a ``ContextBuildError``. A failing
builder releases everything it had built itself before the error leaves it, so
every caller only ever cleans up its own, already accumulated children.

Nodes are consumed through a small duck-typed surface that lxml elements
provide: ``tag`` (a ``str`` for elements, ``etree.Entity`` for entity references,
something else for comments and processing instructions), ``items()`` for
properties, and iteration over children in document order.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, TypeVar

from lxml import etree

from iio_xml_context.shared import (
    AllocationFailure,
    BuildIssue,
    DiagnosticEntry,
    DiagnosticSeverity,
    MalformedDocument,
    MissingRequiredField,
    get_logger,
)

from .entities import Channel, ChannelDirection, Context, Device

ROOT_TAG = "context"
DEVICE_TAG = "device"
CHANNEL_TAG = "channel"
ATTRIBUTE_TAG = "attribute"

_Owned = TypeVar("_Owned", Channel, Device, Context)


def _is_element(node: Any) -> bool:
    return isinstance(node.tag, str)


def _element_children(
    node: Any, reporter: "BuildReporter", component: str, parent_tag: str
) -> Iterator[Any]:
    """Yield the element children of ``node`` in document order.

    Comments and processing instructions are skipped silently. An unresolved
    entity reference may hide elements, so it is reported as unknown content.
    """
    for child in node:
        if _is_element(child):
            yield child
        elif child.tag is etree.Entity:
            reporter.warn(
                component,
                f"Unresolved entity reference '&{child.name};' in <{parent_tag}>",
                BuildIssue.UNKNOWN_FIELD,
                entity=child.name,
            )


@contextmanager
def _release_on_failure(entity: _Owned, label: str) -> Iterator[_Owned]:
    """Release ``entity`` if the body raises, translating memory exhaustion."""
    try:
        yield entity
    except MemoryError as exc:
        entity.release()
        raise AllocationFailure(
            f"Unable to allocate memory while building {label}"
        ) from exc
    except BaseException:
        entity.release()
        raise


class BuildReporter:
    """Shared warning sink for one build pass.

    Every warning goes to the correlation logger and is also kept as a
    ``DiagnosticEntry`` so callers can inspect what was skipped.
    """

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        warn_on_unknown: bool = True,
        diagnostics: Optional[List[DiagnosticEntry]] = None,
    ) -> None:
        self.correlation_id = correlation_id
        self.warn_on_unknown = warn_on_unknown
        self.diagnostics: List[DiagnosticEntry] = (
            diagnostics if diagnostics is not None else []
        )
        self.logger = get_logger(__name__, correlation_id, "context_builder")

    def warn(self, component: str, message: str, issue: BuildIssue, **details: Any) -> None:
        if issue is BuildIssue.UNKNOWN_FIELD and not self.warn_on_unknown:
            return
        self.logger.warning(message, extra={"issue": issue.name, **details})
        self.diagnostics.append(
            DiagnosticEntry(
                severity=DiagnosticSeverity.WARNING,
                message=message,
                component=component,
                issue=issue,
                details=details or None,
                correlation_id=self.correlation_id,
            )
        )

    def error(self, message: str, **details: Any) -> None:
        self.logger.error(message, extra=details)


class AttributeCollector:
    """Reads one ``<attribute>`` element and appends its name to an owner list."""

    component = "attribute_collector"

    def __init__(self, reporter: BuildReporter) -> None:
        self.reporter = reporter

    def collect(
        self, owner_attributes: List[str], node: Any, owner_label: str = "owner"
    ) -> str:
        """Append the attribute named by ``node`` to ``owner_attributes``.

        Args:
            owner_attributes: Attribute list of the owning device or channel
            node: The ``<attribute>`` element
            owner_label: Human readable owner description for messages

        Returns:
            The appended attribute name

        Raises:
            MissingRequiredField: If the element has no ``name`` property
            AllocationFailure: If the list cannot grow
        """
        name: Optional[str] = None

        # A repeated property overwrites the earlier one.
        for key, value in node.items():
            if key == "name":
                name = str(value)
            else:
                self.reporter.warn(
                    self.component,
                    f"Unknown field '{key}' in {owner_label}",
                    BuildIssue.UNKNOWN_FIELD,
                    field=key,
                    owner=owner_label,
                )

        if name is None:
            self.reporter.error(f"Incomplete attribute in {owner_label}", owner=owner_label)
            raise MissingRequiredField(
                f"Attribute in {owner_label} has no name",
                element=ATTRIBUTE_TAG,
                field_name="name",
            )

        try:
            owner_attributes.append(name)
        except MemoryError as exc:
            raise AllocationFailure(
                f"Unable to store attribute '{name}' in {owner_label}"
            ) from exc
        return name


class ChannelBuilder:
    """Builds one ``Channel`` from a ``<channel>`` element."""

    component = "channel_builder"

    def __init__(
        self,
        reporter: BuildReporter,
        attribute_collector: Optional[AttributeCollector] = None,
    ) -> None:
        self.reporter = reporter
        self.attribute_collector = attribute_collector or AttributeCollector(reporter)

    def build(self, owner: Device, node: Any) -> Channel:
        """Build a channel owned by ``owner``.

        Raises:
            MissingRequiredField: If the channel or one of its attributes is incomplete
            AllocationFailure: If memory runs out while building
        """
        channel_id: Optional[str] = None
        display_name: Optional[str] = None
        direction = ChannelDirection.INPUT

        for key, value in node.items():
            if key == "name":
                display_name = str(value)
            elif key == "id":
                channel_id = str(value)
            elif key == "type":
                resolved = ChannelDirection.from_type(value)
                if resolved is None:
                    self.reporter.warn(
                        self.component,
                        f"Unknown channel type {value}",
                        BuildIssue.UNKNOWN_CHANNEL_TYPE,
                        value=value,
                    )
                    resolved = ChannelDirection.INPUT
                direction = resolved
            else:
                self.reporter.warn(
                    self.component,
                    f"Unknown attribute '{key}' in <channel>",
                    BuildIssue.UNKNOWN_FIELD,
                    field=key,
                    device=owner.id,
                )

        if not channel_id:
            self.reporter.error("Incomplete <channel>: missing id", device=owner.id)
            raise MissingRequiredField(
                f"Channel in device {owner.id} has no id",
                element=CHANNEL_TAG,
                field_name="id",
            )

        channel = Channel(id=channel_id, name=display_name, direction=direction)
        with _release_on_failure(channel, f"channel {channel_id}"):
            channel.attach(owner)
            label = f"channel {channel_id}"
            for child in _element_children(node, self.reporter, self.component, CHANNEL_TAG):
                if child.tag == ATTRIBUTE_TAG:
                    self.attribute_collector.collect(channel.attributes, child, label)
                else:
                    self.reporter.warn(
                        self.component,
                        f"Unknown children '{child.tag}' in <channel>",
                        BuildIssue.UNKNOWN_FIELD,
                        element=child.tag,
                        channel=channel_id,
                    )

        return channel


class DeviceBuilder:
    """Builds one ``Device`` and its channels from a ``<device>`` element."""

    component = "device_builder"

    def __init__(
        self,
        reporter: BuildReporter,
        channel_builder: Optional[ChannelBuilder] = None,
        attribute_collector: Optional[AttributeCollector] = None,
    ) -> None:
        self.reporter = reporter
        self.attribute_collector = attribute_collector or AttributeCollector(reporter)
        self.channel_builder = channel_builder or ChannelBuilder(
            reporter, self.attribute_collector
        )

    def build(self, owner: Context, node: Any) -> Device:
        """Build a device owned by ``owner``.

        Raises:
            MissingRequiredField: If the device or anything below it is incomplete
            AllocationFailure: If memory runs out while building
        """
        device_id: Optional[str] = None
        display_name: Optional[str] = None

        for key, value in node.items():
            if key == "name":
                display_name = str(value)
            elif key == "id":
                device_id = str(value)
            else:
                self.reporter.warn(
                    self.component,
                    f"Unknown attribute '{key}' in <device>",
                    BuildIssue.UNKNOWN_FIELD,
                    field=key,
                )

        if not device_id:
            self.reporter.error("Unable to read device ID")
            raise MissingRequiredField(
                "Device has no id", element=DEVICE_TAG, field_name="id"
            )

        device = Device(id=device_id, name=display_name)
        with _release_on_failure(device, f"device {device_id}"):
            device.attach(owner)
            label = f"device {device_id}"
            for child in _element_children(node, self.reporter, self.component, DEVICE_TAG):
                if child.tag == CHANNEL_TAG:
                    self._add_channel(device, child)
                elif child.tag == ATTRIBUTE_TAG:
                    self.attribute_collector.collect(device.attributes, child, label)
                else:
                    self.reporter.warn(
                        self.component,
                        f"Unknown children '{child.tag}' in <device>",
                        BuildIssue.UNKNOWN_FIELD,
                        element=child.tag,
                        device=device_id,
                    )

        return device

    def _add_channel(self, device: Device, node: Any) -> None:
        try:
            channel = self.channel_builder.build(device, node)
        except Exception:
            self.reporter.error("Unable to create channel", device=device.id)
            raise

        # The channel is not owned by the device until the append succeeds.
        with _release_on_failure(channel, f"channel {channel.id}"):
            device.add_channel(channel)


class ContextBuilder:
    """Validates the document root and builds the whole ``Context``."""

    component = "context_builder"

    def __init__(
        self,
        reporter: Optional[BuildReporter] = None,
        device_builder: Optional[DeviceBuilder] = None,
    ) -> None:
        self.reporter = reporter or BuildReporter()
        self.device_builder = device_builder or DeviceBuilder(self.reporter)

    def build(self, root: Any) -> Context:
        """Build a context from the document root element.

        Args:
            root: Root element (or an element tree, whose root is used)

        Returns:
            Fully built Context

        Raises:
            MalformedDocument: If the root element is not ``<context>``
            MissingRequiredField: If any device, channel or attribute is incomplete
            AllocationFailure: If memory runs out while building
        """
        if hasattr(root, "getroot"):
            root = root.getroot()

        if root is None or not _is_element(root) or root.tag != ROOT_TAG:
            tag = getattr(root, "tag", None)
            self.reporter.error("Unrecognized XML file", root_tag=str(tag))
            raise MalformedDocument(
                f"Unexpected root element {tag!r}, expected <{ROOT_TAG}>",
                element=str(tag),
            )

        for key, _ in root.items():
            self.reporter.warn(
                self.component,
                f"Unknown attribute '{key}' in <context>",
                BuildIssue.UNKNOWN_FIELD,
                field=key,
            )

        context = Context()
        with _release_on_failure(context, "context"):
            for child in _element_children(root, self.reporter, self.component, ROOT_TAG):
                if child.tag != DEVICE_TAG:
                    self.reporter.warn(
                        self.component,
                        f"Unknown children '{child.tag}' in <context>",
                        BuildIssue.UNKNOWN_FIELD,
                        element=child.tag,
                    )
                    continue
                self._add_device(context, child)

        self.reporter.logger.debug(
            "Context built",
            extra={
                "device_count": len(context.devices),
                "warning_count": len(self.reporter.diagnostics),
            },
        )
        return context

    def _add_device(self, context: Context, node: Any) -> None:
        try:
            device = self.device_builder.build(context, node)
        except Exception:
            self.reporter.error("Unable to create device")
            raise

        with _release_on_failure(device, f"device {device.id}"):
            context.add_device(device)
