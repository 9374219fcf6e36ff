"""
Yushan Domain Services

Thin per-resource wrappers over the access layer. Each is attached to a
YushanClient as a namespace (``client.novels``, ``client.search``, ...).
"""

from ._base import translate_error
from .auth import AuthService
from .chapters import ChapterService
from .comments import CommentService
from .library import LibraryService
from .novels import NovelService
from .reviews import ReviewService
from .search import SearchService
from .users import UserService

__all__ = [
    "AuthService",
    "ChapterService",
    "CommentService",
    "LibraryService",
    "NovelService",
    "ReviewService",
    "SearchService",
    "UserService",
    "translate_error",
]
