from .posts import Post

__all__ = [
    "Post",
]
