"""
Comment log: comments are embedded in their post and only ever appended.

The author's display name is copied onto the comment when it is written, so
renaming a user later does not rewrite their old comments.
"""

from pymongo.database import Database

from database import object_id, utcnow
from errors import NotFound, ValidationError
from log import logger
from schemas import Comment
from users import get_user


def append_comment(db: Database, post_id: str, user_id: str, text: str) -> Comment:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment text is required")

    user = get_user(db, user_id)
    pid = object_id(post_id, "Post")

    comment = Comment(
        text=text,
        author=user["username"],
        author_id=user_id,
        created_at=utcnow(),
    )
    result = db["post"].update_one({"_id": pid}, {"$push": {"comments": comment.model_dump()}})
    if result.matched_count == 0:
        raise NotFound("Post not found")

    logger.info(f"Comment added to post {post_id} by {user_id}")
    return comment

