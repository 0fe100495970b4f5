"""
Vote ledger for forum posts.

A post stores two sets of user ids, ``upvotes`` and ``downvotes``. Per
(post, user) pair that is a tri-state value:

    none --up--> up --up--> none
    none --down--> down --down--> none
    up --down--> down,  down --up--> up

Voting the same direction twice retracts the vote; voting the other way
switches it. A user id is never in both sets: every transition is written
as one atomic update that pulls the id from the set(s) it must leave and
adds it to the one it must join, so concurrent votes by different users on
the same post are all kept.

Counts and score are derived from the sets whenever a post is returned and
are never stored.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import object_id
from errors import NotFound
from log import logger
from schemas import VoteSummary


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class VoteState(str, Enum):
    NONE = "none"
    UP = "up"
    DOWN = "down"


def next_vote_state(current: VoteState, direction: VoteDirection) -> VoteState:
    target = VoteState(direction.value)
    return VoteState.NONE if current is target else target


def vote_state(post: Dict[str, Any], user_id: Optional[str]) -> VoteState:
    if user_id is None:
        return VoteState.NONE
    if user_id in post.get("upvotes", []):
        return VoteState.UP
    if user_id in post.get("downvotes", []):
        return VoteState.DOWN
    return VoteState.NONE


def vote_summary(post: Dict[str, Any], user_id: Optional[str] = None) -> VoteSummary:
    upvotes = post.get("upvotes", [])
    downvotes = post.get("downvotes", [])
    return VoteSummary(
        upvote_count=len(upvotes),
        downvote_count=len(downvotes),
        vote_score=len(upvotes) - len(downvotes),
        has_upvoted=user_id is not None and user_id in upvotes,
        has_downvoted=user_id is not None and user_id in downvotes,
    )


def state_update(state: VoteState, user_id: str) -> Dict[str, Any]:
    """Mongo update document that leaves ``user_id`` in ``state``."""
    if state is VoteState.UP:
        return {"$pull": {"downvotes": user_id}, "$addToSet": {"upvotes": user_id}}
    if state is VoteState.DOWN:
        return {"$pull": {"upvotes": user_id}, "$addToSet": {"downvotes": user_id}}
    return {"$pull": {"upvotes": user_id, "downvotes": user_id}}


def cast_vote(db: Database, post_id: str, user_id: str, direction: VoteDirection) -> VoteSummary:
    pid = object_id(post_id, "Post")
    post = db["post"].find_one({"_id": pid}, {"upvotes": 1, "downvotes": 1})
    if not post:
        raise NotFound("Post not found")

    current = vote_state(post, user_id)
    target = next_vote_state(current, direction)

    updated = db["post"].find_one_and_update(
        {"_id": pid},
        state_update(target, user_id),
        projection={"upvotes": 1, "downvotes": 1},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        # deleted between the read and the write
        raise NotFound("Post not found")

    logger.info(f"Vote on post {post_id} by {user_id}: {current.value} -> {target.value}")
    return vote_summary(updated, user_id)
