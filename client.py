"""
Client sync layer for the forum.

``ForumView`` keeps the display state of rendered posts and patches it only
from what the server answers: a vote click overwrites the score and the two
active flags from the vote response, a new comment is appended from the
comment response. Counters are never incremented locally, since a second
click on the same button retracts the vote rather than adding another one.

Every action control goes ``idle -> pending -> idle``. While pending the
control is disabled, so a second click is ignored instead of sending a
duplicate request. The control returns to idle whether the request
succeeded or failed; only success changes what is displayed.

Example:
    >>> http = httpx.Client(base_url="http://localhost:8000")
    >>> session = ApiSession()
    >>> view = ForumView(ApiClient(http, session), notify=print)
    >>> session.login(view.api, "fern@example.com", "secret1")
    >>> view.load()
    >>> view.upvote(view.order[0])
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

from log import logger

Notify = Callable[[str, str], None]


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ApiSession:
    """Bearer token holder with an explicit invalidate-on-401 hook."""

    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.user: Optional[Dict[str, Any]] = None
        self._on_invalidate: List[Callable[[], None]] = []

    @property
    def is_logged_in(self) -> bool:
        return bool(self.token)

    def on_invalidate(self, hook: Callable[[], None]) -> None:
        self._on_invalidate.append(hook)

    def invalidate(self) -> None:
        self.token = None
        self.user = None
        for hook in self._on_invalidate:
            hook()

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def login(self, api: "ApiClient", email: str, password: str) -> Dict[str, Any]:
        data = api.request("POST", "/login", json={"email": email, "password": password}, auth=False)
        self.token = data["token"]
        self.user = data.get("user")
        return data


class ApiClient:
    def __init__(self, http: httpx.Client, session: ApiSession):
        self.http = http
        self.session = session

    def request(self, method: str, path: str, json: Any = None, auth: bool = True) -> Any:
        headers = self.session.headers() if auth else {}
        try:
            response = self.http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(0, "Network error, please try again")

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            if response.status_code == 401:
                self.session.invalidate()
            message = "Request failed"
            if isinstance(data, dict):
                message = data.get("error") or data.get("message") or message
            raise ApiError(response.status_code, message)
        return data


class ControlState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


@dataclass
class Control:
    state: ControlState = ControlState.IDLE

    @property
    def disabled(self) -> bool:
        return self.state is ControlState.PENDING


@dataclass
class CommentItem:
    author: str
    text: str


@dataclass
class PostCard:
    post_id: str
    title: str
    content: str
    author: str
    created_at: Optional[datetime]
    vote_score: int
    upvote_active: bool
    downvote_active: bool
    comments: List[CommentItem] = field(default_factory=list)
    upvote_button: Control = field(default_factory=Control)
    downvote_button: Control = field(default_factory=Control)
    comment_button: Control = field(default_factory=Control)

    @classmethod
    def from_payload(cls, post: Dict[str, Any]) -> "PostCard":
        created = post.get("createdAt")
        return cls(
            post_id=post["id"],
            title=post["title"],
            content=post["content"],
            author=post["author"],
            created_at=datetime.fromisoformat(created) if created else None,
            vote_score=post.get("voteScore", 0),
            upvote_active=post.get("hasUpvoted", False),
            downvote_active=post.get("hasDownvoted", False),
            comments=[CommentItem(c["author"], c["text"]) for c in post.get("comments", [])],
        )

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    @property
    def meta(self) -> str:
        when = self.created_at.strftime("%Y-%m-%d %H:%M") if self.created_at else ""
        return f"Posted by {self.author} on {when}"

    def apply_vote(self, result: Dict[str, Any]) -> None:
        self.vote_score = result["voteScore"]
        self.upvote_active = result["hasUpvoted"]
        self.downvote_active = result["hasDownvoted"]

    def apply_comment(self, comment: Dict[str, Any]) -> None:
        self.comments.append(CommentItem(comment["author"], comment["text"]))


class ForumView:
    def __init__(self, api: ApiClient, notify: Optional[Notify] = None):
        self.api = api
        self.notify: Notify = notify or (lambda level, message: None)
        self.cards: Dict[str, PostCard] = {}
        self.order: List[str] = []

    def load(self) -> List[PostCard]:
        posts = self.api.request("GET", "/posts", auth=self.api.session.is_logged_in)
        self.cards = {}
        self.order = []
        for post in posts:
            card = PostCard.from_payload(post)
            self.cards[card.post_id] = card
            self.order.append(card.post_id)
        return [self.cards[pid] for pid in self.order]

    def create_post(self, title: str, content: str) -> Optional[PostCard]:
        title, content = title.strip(), content.strip()
        if not title or not content:
            self.notify("warning", "Please fill in all fields.")
            return None
        try:
            post = self.api.request("POST", "/posts", json={"title": title, "content": content})
        except ApiError as e:
            self.notify("error", e.message)
            return None

        card = PostCard.from_payload(post)
        self.cards[card.post_id] = card
        self.order.insert(0, card.post_id)
        self.notify("success", "Post created successfully!")
        return card

    def _card(self, post_id: str) -> Optional[PostCard]:
        card = self.cards.get(post_id)
        if card is None:
            self.notify("error", "Post not found")
        return card

    def upvote(self, post_id: str) -> bool:
        card = self._card(post_id)
        if card is None:
            return False
        return self._vote(card, card.upvote_button, "upvote")

    def downvote(self, post_id: str) -> bool:
        card = self._card(post_id)
        if card is None:
            return False
        return self._vote(card, card.downvote_button, "downvote")

    def _vote(self, card: PostCard, button: Control, action: str) -> bool:
        if button.disabled:
            return False
        if not self.api.session.is_logged_in:
            self.notify("warning", "Please log in to vote.")
            return False

        button.state = ControlState.PENDING
        try:
            result = self.api.request("POST", f"/posts/{card.post_id}/{action}")
            card.apply_vote(result)
            return True
        except ApiError as e:
            self.notify("error", e.message)
            return False
        finally:
            button.state = ControlState.IDLE

    def comment(self, post_id: str, text: str) -> bool:
        card = self._card(post_id)
        if card is None:
            return False
        button = card.comment_button
        if button.disabled:
            return False
        text = text.strip()
        if not text:
            self.notify("warning", "Please enter a comment.")
            return False
        if not self.api.session.is_logged_in:
            self.notify("warning", "Please log in to comment.")
            return False

        button.state = ControlState.PENDING
        try:
            comment = self.api.request("POST", f"/posts/{post_id}/comments", json={"text": text})
            card.apply_comment(comment)
            self.notify("success", "Comment posted!")
            return True
        except ApiError as e:
            self.notify("error", e.message)
            return False
        finally:
            button.state = ControlState.IDLE
