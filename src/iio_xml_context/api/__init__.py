"""Public entry points for building contexts from XML."""

from .loader import XMLContextLoader, create_xml_context, create_xml_context_mem

__all__ = [
    "XMLContextLoader",
    "create_xml_context",
    "create_xml_context_mem",
]
