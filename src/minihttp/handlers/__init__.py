"""
Route handlers.

    from minihttp.handlers import index, echo, user_agent, FileHandler

    router.add_route("/", index)
    router.add_route("/files", FileHandler(storage).get)
"""

from .basic import index, echo, user_agent
from .files import FileHandler

__all__ = [
    "index",
    "echo",
    "user_agent",
    "FileHandler",
]
