"""Small helpers shared by the HTTP layer and the use cases."""

__all__ = [
    "asyncio_utils",
]
