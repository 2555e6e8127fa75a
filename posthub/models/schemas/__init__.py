from .posts import (
    PostFields,
    PostRead,
    PostMutationResponse,
    DeleteRequest,
    SuccessResponse,
    ErrorResponse,
)

__all__ = [
    "PostFields",
    "PostRead",
    "PostMutationResponse",
    "DeleteRequest",
    "SuccessResponse",
    "ErrorResponse",
]
