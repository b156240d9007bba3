"""Test module for iio_xml_context package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    import iio_xml_context

    assert iio_xml_context is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    import iio_xml_context

    assert isinstance(iio_xml_context.__version__, str)
    assert iio_xml_context.__version__ == "0.1.0"


def test_package_exports_entry_points() -> None:
    """Test that the simple API is exposed at package level."""
    import iio_xml_context

    for name in ("create_xml_context", "create_xml_context_mem", "XMLContextLoader",
                 "Context", "Device", "Channel", "MalformedDocument"):
        assert name in iio_xml_context.__all__
        assert hasattr(iio_xml_context, name)
