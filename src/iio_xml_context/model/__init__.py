"""Context object model and its recursive builders.

Key Components:
    Context: Top-level description owning devices
    Device: Identified grouping of channels and attributes
    Channel: Directional, attribute-bearing leaf under a device
    ContextBuilder: Validates the document root and builds the whole graph
"""

from .builder import (
    AttributeCollector,
    BuildReporter,
    ChannelBuilder,
    ContextBuilder,
    DeviceBuilder,
)
from .entities import (
    XML_CONTEXT_NAME,
    Channel,
    ChannelDirection,
    Context,
    Device,
)

__all__ = [
    "XML_CONTEXT_NAME",
    "AttributeCollector",
    "BuildReporter",
    "Channel",
    "ChannelBuilder",
    "ChannelDirection",
    "Context",
    "ContextBuilder",
    "Device",
    "DeviceBuilder",
]
