import logging

from post import Post, Comment
from store import Store
from substrate import POSTS_KEY
from util import generate_id, now_ms, deserialize_data


class PostsStore(Store):
    """
    Owns the post collection, most recent first.

    Every mutation maps over the whole tuple and swaps in a new one, so a
    snapshot handed to a listener is never changed afterwards.
    """

    def __init__(self, substrate, id_factory=generate_id, clock=now_ms):
        super().__init__(substrate)
        self._id_factory = id_factory
        self._clock = clock
        self._posts = self._load(POSTS_KEY, lambda raw: deserialize_data(raw, Post), ())
        logging.info(f"Posts store loaded {len(self._posts)} posts")

    @property
    def snapshot(self):
        return self._posts

    @property
    def posts(self):
        return self._posts

    def get_post(self, post_id):
        for p in self._posts:
            if p.id == post_id:
                return p
        return None

    def _save(self, value=None):
        return self._publish(
            [(POSTS_KEY, self._posts, "Failed to save posts")], value=value
        )

    def _replace_post(self, post_id, update):
        """
        Rebuilds the collection with update(post) in place of the matching
        post. Returns the updated post, or None when nothing matched.
        """
        updated = None
        new_posts = []
        for p in self._posts:
            if p.id == post_id and updated is None:
                updated = update(p)
                new_posts.append(updated)
            else:
                new_posts.append(p)
        if updated is not None:
            self._posts = tuple(new_posts)
        return updated

    def create_post(self, author_id, content, image_url=None):
        if content is None or not content.strip():
            self._reject("Post content cannot be empty")
        if not author_id:
            self._reject("User ID is required")

        post = Post(
            post_id=self._id_factory(),
            user_id=author_id,
            content=content,
            timestamp=self._clock(),
            image_url=image_url,
        )
        self._posts = (post,) + self._posts
        logging.info(f"Created post {post.id} by {author_id}")
        return self._save(value=post)

    def toggle_like(self, post_id, user_id):
        if not post_id or not user_id:
            self._reject("Post ID and User ID are required")

        post = self._replace_post(post_id, lambda p: p.toggle_like(user_id))
        if post is None:
            logging.debug(f"toggle_like: no post with id {post_id}")
            return self._unchanged()
        logging.debug(f"{user_id} {'liked' if post.is_liked_by(user_id) else 'unliked'} post {post_id}")
        return self._save(value=post)

    def add_comment(self, post_id, comment):
        if (
            not post_id
            or comment is None
            or not comment.content
            or not comment.content.strip()
            or not comment.user_id
        ):
            self._reject("Invalid comment data")

        post = self._replace_post(post_id, lambda p: p.with_comment(comment))
        if post is None:
            logging.debug(f"add_comment: no post with id {post_id}")
            return self._unchanged()
        logging.debug(f"{comment.user_id} commented on post {post_id}")
        return self._save(value=post)

    def comment(self, post_id, user_id, text):
        """Builds a comment from raw input text and appends it to post_id."""
        comment = Comment(
            comment_id=self._id_factory(),
            user_id=user_id,
            content=(text or "").strip(),
            timestamp=self._clock(),
        )
        return self.add_comment(post_id, comment)
