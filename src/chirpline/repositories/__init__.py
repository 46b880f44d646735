"""Store adapters backing the feed core."""

from .post_repo import PostRepository, PostStore
from .user_repo import UserRepository, UserResolver

__all__ = ["PostRepository", "PostStore", "UserRepository", "UserResolver"]
