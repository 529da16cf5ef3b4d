"""Social feed posts and likes."""

import logging
from typing import Any, Iterable, List, Optional

from universe.auth.roles import Role, enforce_role, owner_column_for
from universe.auth.tokens import IdentityClaims
from universe.errors import Forbidden, NotFoundError, ValidationError, persistence_errors
from universe.models import Post
from universe.repositories import PostRepository

from .serializers import decode_image

logger = logging.getLogger(__name__)

# Upper bound of the 32-bit likes column
MAX_LIKES = 2**31 - 1


class PostService:
    """Create, list and delete posts and adjust their like counts."""

    def __init__(self, post_repo: PostRepository):
        self.post_repo = post_repo

    def list_posts(self) -> List[Post]:
        with persistence_errors("fetch posts"):
            return self.post_repo.list_newest_first()

    def list_user_posts(self, user_id: str) -> List[Post]:
        with persistence_errors("fetch user posts"):
            return self.post_repo.get_by_author(user_id)

    def get_post(self, post_id: str) -> Post:
        with persistence_errors("fetch post"):
            post = self.post_repo.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def create_post(self, identity: IdentityClaims, caption: Optional[str], image: Optional[str],
                    image_mime_type: Optional[str], allowed_roles: Iterable[Role]) -> Post:
        """Create a post owned by the caller through the column matching their role."""
        enforce_role(identity, allowed_roles)

        if not caption or not image or not image_mime_type:
            raise ValidationError("Missing required fields: caption, image, imageMimeType")

        post = Post(
            caption=caption,
            image=decode_image(image),
            image_mime_type=image_mime_type,
            likes=0,
        )
        setattr(post, owner_column_for(identity.role), identity.id)

        with persistence_errors("create post"):
            post = self.post_repo.add(post)
        logger.info("User %s created post %s", identity.id, post.id)
        return post

    def delete_post(self, identity: IdentityClaims, post_id: str) -> None:
        """Delete a post owned by the caller through either owner column."""
        post = self.get_post(post_id)
        if not post.is_owned_by(identity.id):
            logger.warning("User %s denied deletion of post %s", identity.id, post_id)
            raise Forbidden("Not authorized to delete this post")

        with persistence_errors("delete post"):
            deleted = self.post_repo.delete(post_id)
        if not deleted:
            # A concurrent delete got there first
            raise NotFoundError("Post not found")
        logger.info("User %s deleted post %s", identity.id, post_id)

    def update_likes(self, post_id: str, delta: Any) -> Post:
        """Add ``delta`` to the like count, kept within ``0..MAX_LIKES``."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("Missing postId or delta")

        post = self.get_post(post_id)
        likes = min(MAX_LIKES, max(0, (post.likes or 0) + delta))
        with persistence_errors("update post likes"):
            updated = self.post_repo.set_likes(post_id, likes)
        if updated is None:
            raise NotFoundError("Post not found")
        return updated
