from util import toggle_membership, unique


class Comment:
    def __init__(self, comment_id, user_id, content, timestamp):
        self.id = comment_id
        self.user_id = user_id
        self.content = content
        self.timestamp = timestamp

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "content": self.content,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            comment_id=data["id"],
            user_id=data["userId"],
            content=data["content"],
            timestamp=data["timestamp"],
        )

    def __eq__(self, other):
        if not isinstance(other, Comment):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Comment(id={self.id!r}, user_id={self.user_id!r})"


class Post:
    def __init__(self, post_id, user_id, content, timestamp, image_url=None, likes=(), comments=()):
        self.id = post_id
        self.user_id = user_id
        self.content = content
        self.image_url = image_url
        self.timestamp = timestamp
        self.likes = unique(likes)
        self.comments = tuple(comments)

    def to_dict(self):
        data = {
            "id": self.id,
            "userId": self.user_id,
            "content": self.content,
            "likes": list(self.likes),
            "comments": [c.to_dict() for c in self.comments],
            "timestamp": self.timestamp,
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            post_id=data["id"],
            user_id=data["userId"],
            content=data["content"],
            timestamp=data["timestamp"],
            image_url=data.get("imageUrl"),
            likes=data.get("likes") or (),
            comments=[Comment.from_dict(c) for c in data.get("comments") or ()],
        )

    def _copy(self, likes=None, comments=None):
        return Post(
            post_id=self.id,
            user_id=self.user_id,
            content=self.content,
            timestamp=self.timestamp,
            image_url=self.image_url,
            likes=self.likes if likes is None else likes,
            comments=self.comments if comments is None else comments,
        )

    def is_liked_by(self, user_id):
        return user_id in self.likes

    def toggle_like(self, user_id):
        """Returns a new Post with user_id's like flipped."""
        return self._copy(likes=toggle_membership(self.likes, user_id))

    def with_comment(self, comment):
        """Returns a new Post with comment appended after the existing ones."""
        return self._copy(comments=self.comments + (comment,))

    def __eq__(self, other):
        if not isinstance(other, Post):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Post(id={self.id!r}, user_id={self.user_id!r}, likes={len(self.likes)}, comments={len(self.comments)})"
