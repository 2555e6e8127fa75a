"""Post Hub: a small posts backend with image uploads and a shared admin password."""

__version__ = "1.0.0"

__all__: list[str] = ["__version__"]
