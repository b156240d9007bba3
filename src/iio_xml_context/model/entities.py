"""In-memory object graph for an XML-described IIO context.

A ``Context`` owns its ``Device`` objects, and each ``Device`` owns its
``Channel`` objects and attribute names. Back-references from children to their
parent are weak: they identify the owner but never keep it alive, so tearing
down a parent cannot be blocked by a child and a child never releases its parent.
"""

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

XML_CONTEXT_NAME = "xml"


class ChannelDirection(Enum):
    """Direction of a channel."""

    INPUT = "input"
    OUTPUT = "output"

    @classmethod
    def from_type(cls, value: str) -> Optional["ChannelDirection"]:
        """Map a ``type`` property value to a direction, or None if unknown."""
        for direction in cls:
            if direction.value == value:
                return direction
        return None


@dataclass(eq=True)
class Channel:
    """Identified, directional, attribute-bearing leaf under a device."""

    id: str
    name: Optional[str] = None
    direction: ChannelDirection = ChannelDirection.INPUT
    attributes: List[str] = field(default_factory=list)

    _device_ref: Optional["weakref.ReferenceType[Device]"] = field(
        default=None, init=False, repr=False, compare=False
    )
    _released: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def device(self) -> Optional["Device"]:
        """Owning device, or None once released or if the device is gone."""
        return self._device_ref() if self._device_ref is not None else None

    @property
    def is_output(self) -> bool:
        return self.direction is ChannelDirection.OUTPUT

    @property
    def is_released(self) -> bool:
        return self._released

    def attach(self, device: "Device") -> None:
        """Record the owning device without taking ownership of it."""
        self._device_ref = weakref.ref(device)

    def find_attribute(self, name: str) -> Optional[str]:
        """Return the attribute name if the channel has it."""
        return name if name in self.attributes else None

    def release(self) -> None:
        """Drop owned attribute names and the device back-reference."""
        if self._released:
            return
        self.attributes.clear()
        self._device_ref = None
        self._released = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "direction": self.direction.value,
            "attributes": list(self.attributes),
        }


@dataclass(eq=True)
class Device:
    """Identified grouping of channels and attributes within a context."""

    id: str
    name: Optional[str] = None
    attributes: List[str] = field(default_factory=list)
    channels: List[Channel] = field(default_factory=list)

    _context_ref: Optional["weakref.ReferenceType[Context]"] = field(
        default=None, init=False, repr=False, compare=False
    )
    _released: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def context(self) -> Optional["Context"]:
        """Owning context, or None once released or if the context is gone."""
        return self._context_ref() if self._context_ref is not None else None

    @property
    def is_released(self) -> bool:
        return self._released

    def attach(self, context: "Context") -> None:
        """Record the owning context without taking ownership of it."""
        self._context_ref = weakref.ref(context)

    def add_channel(self, channel: Channel) -> None:
        """Take ownership of a fully built channel."""
        self.channels.append(channel)

    def get_channel(self, index: int) -> Optional[Channel]:
        """Get channel by position, or None if out of range."""
        if 0 <= index < len(self.channels):
            return self.channels[index]
        return None

    def find_channel(self, name_or_id: str, output: bool = False) -> Optional[Channel]:
        """Find a channel of the given direction by id first, then by name."""
        candidates = [chn for chn in self.channels if chn.is_output == output]
        for channel in candidates:
            if channel.id == name_or_id:
                return channel
        for channel in candidates:
            if channel.name is not None and channel.name == name_or_id:
                return channel
        return None

    def find_attribute(self, name: str) -> Optional[str]:
        """Return the attribute name if the device has it."""
        return name if name in self.attributes else None

    def release(self) -> None:
        """Release every owned channel, then the device's own state."""
        if self._released:
            return
        for channel in self.channels:
            channel.release()
        self.channels.clear()
        self.attributes.clear()
        self._context_ref = None
        self._released = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "attributes": list(self.attributes),
            "channels": [channel.to_dict() for channel in self.channels],
        }


@dataclass(eq=True)
class Context:
    """Top-level model of a hardware description built from XML.

    The context is a description only: ``backend_ops`` is always None because
    no live connection backs it.
    """

    name: str = XML_CONTEXT_NAME
    devices: List[Device] = field(default_factory=list)
    backend_ops: None = field(default=None, compare=False)

    _released: bool = field(default=False, init=False, repr=False, compare=False)

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.destroy()

    @property
    def is_released(self) -> bool:
        return self._released

    def add_device(self, device: Device) -> None:
        """Take ownership of a fully built device."""
        self.devices.append(device)

    def get_device(self, index: int) -> Optional[Device]:
        """Get device by position, or None if out of range."""
        if 0 <= index < len(self.devices):
            return self.devices[index]
        return None

    def find_device(self, name_or_id: str) -> Optional[Device]:
        """Find a device by id first, then by display name."""
        for device in self.devices:
            if device.id == name_or_id:
                return device
        for device in self.devices:
            if device.name is not None and device.name == name_or_id:
                return device
        return None

    def release(self) -> None:
        """Release every owned device (and through them, their channels)."""
        if self._released:
            return
        for device in self.devices:
            device.release()
        self.devices.clear()
        self._released = True

    destroy = release

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "devices": [device.to_dict() for device in self.devices],
        }
