"""IIO XML Context.

Builds an in-memory description of an IIO context (devices, their channels and
named attributes) from an XML document, with all-or-nothing construction: a
failure anywhere releases everything built so far and no partial context is
ever returned.

Progressive API Disclosure:
- Level 1: Simple functions - create_xml_context(), create_xml_context_mem()
- Level 2: Configured loader - XMLContextLoader class returning BuildResult
"""

__version__ = "0.1.0"
__author__ = "IIO XML Context Team"

# Level 1: Simple functions
# Level 2: Configured loader
from .api import XMLContextLoader, create_xml_context, create_xml_context_mem

# Object model
from .model import Channel, ChannelDirection, Context, Device

# Configuration, results and errors
from .shared import (
    AllocationFailure,
    BuildResult,
    ContextBuildError,
    LoaderConfig,
    MalformedDocument,
    MissingRequiredField,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "create_xml_context",
    "create_xml_context_mem",

    # Level 2: Configured loader
    "XMLContextLoader",
    "BuildResult",
    "LoaderConfig",

    # Object model
    "Context",
    "Device",
    "Channel",
    "ChannelDirection",

    # Errors
    "ContextBuildError",
    "MalformedDocument",
    "MissingRequiredField",
    "AllocationFailure",
]
