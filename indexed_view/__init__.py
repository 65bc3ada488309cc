"""Indexed-color bitmap presentation with integer-zoom letterboxing."""

from indexed_view.api.bitmap import IndexedBitmap, IndexedImage


def run(argv: list[str] | None = None) -> int:
    """Run the viewer CLI."""
    from indexed_view.runtime.cli import main

    return main(argv)


__all__ = ["IndexedBitmap", "IndexedImage", "run"]
