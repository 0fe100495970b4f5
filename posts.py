"""
Forum post store.

Posts own their comments and vote sets. Every post handed back to a client
is rendered through ``post_out`` so that vote counts, score and the caller's
own vote flags come from the sets as they are at response time.
"""

from typing import Any, Callable, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from comments import append_comment
from database import object_id, utcnow
from errors import Forbidden, NotFound, ValidationError
from log import logger
from schemas import Comment, CommentOut, Post, PostOut, VoteSummary
from users import get_user
from votes import VoteDirection, cast_vote, vote_summary


def post_out(doc: Dict[str, Any], caller_id: Optional[str] = None) -> PostOut:
    summary = vote_summary(doc, caller_id)
    return PostOut(
        id=str(doc["_id"]),
        title=doc["title"],
        content=doc["content"],
        author=doc["author"],
        author_id=doc["author_id"],
        created_at=doc["created_at"],
        comments=[CommentOut(**c) for c in doc.get("comments", [])],
        **summary.model_dump(),
    )


class PostStore:
    def __init__(self, db: Database, clock: Callable = utcnow):
        self.db = db
        self.clock = clock

    @property
    def collection(self):
        return self.db["post"]

    def _find(self, post_id: str) -> Dict[str, Any]:
        post = self.collection.find_one({"_id": object_id(post_id, "Post")})
        if not post:
            raise NotFound("Post not found")
        return post

    def create_post(self, caller_id: str, title: str, content: str) -> PostOut:
        title = (title or "").strip()
        content = (content or "").strip()
        if not title or not content:
            raise ValidationError("Title and content are required")

        user = get_user(self.db, caller_id)
        post = Post(
            title=title,
            content=content,
            author=user["username"],
            author_id=caller_id,
            created_at=self.clock(),
        )
        doc = post.model_dump()
        doc["_id"] = self.collection.insert_one(doc).inserted_id
        logger.info(f"Post {doc['_id']} created by {caller_id}")
        return post_out(doc, caller_id)

    def list_posts(self, caller_id: Optional[str] = None) -> List[PostOut]:
        # _id breaks created_at ties: later inserts sort first
        cursor = self.collection.find({}).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        return [post_out(doc, caller_id) for doc in cursor]

    def get_post(self, post_id: str, caller_id: Optional[str] = None) -> PostOut:
        return post_out(self._find(post_id), caller_id)

    def delete_post(self, post_id: str, caller_id: str) -> None:
        post = self._find(post_id)
        if post["author_id"] != caller_id:
            raise Forbidden("You can only delete your own posts")

        result = self.collection.delete_one({"_id": post["_id"], "author_id": caller_id})
        if result.deleted_count == 0:
            raise NotFound("Post not found")
        logger.info(f"Post {post_id} deleted by {caller_id}")

    def cast_vote(self, post_id: str, caller_id: str, direction: VoteDirection) -> VoteSummary:
        return cast_vote(self.db, post_id, caller_id, direction)

    def append_comment(self, post_id: str, caller_id: str, text: str) -> Comment:
        return append_comment(self.db, post_id, caller_id, text)
