"""
Read-side views computed from store snapshots.

Nothing here is stored: every function takes the current users/posts
tuples and the session user and returns fresh values. Author ids are
resolved on each call, and an id with no matching user is shown as an
unknown author instead of failing.
"""
from datetime import datetime

from config import get_posts_per_page

MAX_CONTENT_LENGTH = 280
UNKNOWN_AUTHOR = "Unknown author"


def filter_feed(posts, session_user, following_only=True):
    if not following_only:
        return tuple(posts)
    if session_user is None:
        return ()
    visible = set(session_user.following)
    visible.add(session_user.id)
    return tuple(p for p in posts if p.user_id in visible)


def sort_by_recency(posts):
    # sorted() is stable, so equal timestamps keep their incoming order
    return tuple(sorted(posts, key=lambda p: p.timestamp, reverse=True))


class FeedPage:
    def __init__(self, posts, has_more, total):
        self.posts = posts
        self.has_more = has_more
        self.total = total

    def __repr__(self):
        return f"FeedPage(shown={len(self.posts)}, total={self.total}, has_more={self.has_more})"


def paginate(posts, visible):
    posts = tuple(posts)
    visible = max(0, visible)
    return FeedPage(posts[:visible], visible < len(posts), len(posts))


class FeedCursor:
    """Visible-count cursor: loading more just widens the window."""

    def __init__(self, page_size=None):
        self.page_size = page_size or get_posts_per_page()
        self.visible = self.page_size

    def load_more(self):
        self.visible += self.page_size
        return self.visible

    def reset(self):
        self.visible = self.page_size

    def page(self, posts):
        return paginate(posts, self.visible)


def build_feed(posts, session_user, following_only=True, visible=None):
    if visible is None:
        visible = get_posts_per_page()
    return paginate(sort_by_recency(filter_feed(posts, session_user, following_only)), visible)


def resolve_author(users, user_id):
    for u in users:
        if u.id == user_id:
            return u
    return None


def author_label(users, user_id):
    author = resolve_author(users, user_id)
    return author.username if author else UNKNOWN_AUTHOR


def search_users(users, term):
    term = (term or "").lower()
    return tuple(u for u in users if term in u.username.lower())


class ProfileView:
    def __init__(self, user, posts, is_current_user, is_following):
        self.user = user
        self.posts = posts
        self.is_current_user = is_current_user
        self.is_following = is_following

    @property
    def follower_count(self):
        return len(self.user.followers)

    @property
    def following_count(self):
        return len(self.user.following)

    @property
    def post_count(self):
        return len(self.posts)


def build_profile(username, users, posts, session_user=None):
    """
    Aggregates a user's profile by handle.
    Returns None when no user has that username.
    """
    user = None
    for u in users:
        if u.username == username:
            user = u
            break
    if user is None:
        return None

    user_posts = sort_by_recency(p for p in posts if p.user_id == user.id)
    is_current_user = session_user is not None and session_user.id == user.id
    is_following = session_user is not None and session_user.is_following(user.id)
    return ProfileView(user, user_posts, is_current_user, is_following)


def display_content(content, expanded=False):
    if expanded or len(content) <= MAX_CONTENT_LENGTH:
        return content
    return content[:MAX_CONTENT_LENGTH] + "..."


def characters_left(text):
    return MAX_CONTENT_LENGTH - len(text)


def format_timestamp(timestamp):
    return datetime.fromtimestamp(timestamp / 1000).strftime("%b %d, %H:%M")
