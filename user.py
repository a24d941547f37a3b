from util import unique


class User:
    def __init__(self, user_id, username, avatar=None, bio=None, followers=(), following=()):
        self.id = user_id
        self.username = username
        self.avatar = avatar
        self.bio = bio
        self.followers = unique(followers)  # users following this user
        self.following = unique(following)  # users this user follows

    def to_dict(self):
        data = {
            "id": self.id,
            "username": self.username,
            "followers": list(self.followers),
            "following": list(self.following),
        }
        if self.avatar is not None:
            data["avatar"] = self.avatar
        if self.bio is not None:
            data["bio"] = self.bio
        return data

    @classmethod
    def from_dict(cls, data):
        user_id = data["id"]
        # stored edges pointing back at the user itself are dropped on load
        return cls(
            user_id=user_id,
            username=data["username"],
            avatar=data.get("avatar"),
            bio=data.get("bio"),
            followers=[f for f in data.get("followers") or () if f != user_id],
            following=[f for f in data.get("following") or () if f != user_id],
        )

    def replace(self, **changes):
        fields = {
            "user_id": self.id,
            "username": self.username,
            "avatar": self.avatar,
            "bio": self.bio,
            "followers": self.followers,
            "following": self.following,
        }
        fields.update(changes)
        return User(**fields)

    def is_following(self, user_id):
        return user_id in self.following

    def __eq__(self, other):
        if not isinstance(other, User):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.id, self.username))

    def __repr__(self):
        return f"User(id={self.id!r}, username={self.username!r})"
