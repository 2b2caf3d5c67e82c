"""Basic smoke tests to verify project setup."""

from litvcs import __version__


def test_version() -> None:
    """Test that version is correctly defined."""
    assert __version__ == "0.1.0"


def test_import_storage() -> None:
    """Test that storage module can be imported."""
    from litvcs import storage  # noqa: F401


def test_import_core() -> None:
    """Test that core module can be imported."""
    from litvcs import core  # noqa: F401


def test_import_cli() -> None:
    """Test that cli module can be imported."""
    from litvcs.cli import main  # noqa: F401


def test_write_file_fixture(workspace, write_file) -> None:
    """Test that write_file creates nested files."""
    path = write_file("a/b.txt", "content")
    assert path == workspace / "a" / "b.txt"
    assert path.read_text() == "content"
