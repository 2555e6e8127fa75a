"""Domain services: image storage, record normalization, persistence, admin gate."""
from .admin_gate import AdminGate
from .image_store import ImageStore
from .post_repository import PostRepository

__all__ = ["AdminGate", "ImageStore", "PostRepository"]
