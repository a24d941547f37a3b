import logging

from feed import search_users
from store import Store
from substrate import USERS_KEY, CURRENT_USER_KEY
from user import User
from util import generate_id, deserialize_data, toggle_membership


class IdentitySnapshot:
    """Directory of known users plus the session user (or None)."""

    def __init__(self, users, current_user):
        self.users = tuple(users)
        self.current_user = current_user

    def __repr__(self):
        current = self.current_user.username if self.current_user else None
        return f"IdentitySnapshot(users={len(self.users)}, current_user={current!r})"


class IdentityStore(Store):
    def __init__(self, substrate, id_factory=generate_id):
        super().__init__(substrate)
        self._id_factory = id_factory

        self._users = self._load(USERS_KEY, lambda raw: deserialize_data(raw, User), ())
        self._current_user = self._load(
            CURRENT_USER_KEY, lambda raw: deserialize_data(raw, User, many=False), None
        )
        logging.info(
            f"Identity store loaded {len(self._users)} users"
            + (f", session '{self._current_user.username}'" if self._current_user else "")
        )

    # --------------------------------------------------------------------------
    # Reads
    # --------------------------------------------------------------------------
    @property
    def snapshot(self):
        return IdentitySnapshot(self._users, self._current_user)

    @property
    def users(self):
        return self._users

    @property
    def current_user(self):
        return self._current_user

    def get_user(self, user_id):
        for u in self._users:
            if u.id == user_id:
                return u
        return None

    def find_user(self, username):
        for u in self._users:
            if u.username == username:
                return u
        return None

    def search_users(self, term):
        return search_users(self._users, term)

    # --------------------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------------------
    def _users_write(self):
        return (USERS_KEY, self._users, "Failed to save users")

    def _session_write(self):
        return (CURRENT_USER_KEY, self._current_user, "Failed to save session")

    # --------------------------------------------------------------------------
    # Session
    # --------------------------------------------------------------------------
    def login(self, username):
        if username is None or not username.strip():
            self._reject("Username cannot be empty")
        username = username.strip()

        writes = []
        user = self.find_user(username)
        if user is None:
            user = User(self._id_factory(), username)
            self._users = self._users + (user,)
            writes.append(self._users_write())
            logging.info(f"Created user '{username}' ({user.id})")

        self._current_user = user
        writes.append(self._session_write())
        logging.info(f"User '{username}' logged in")
        return self._publish(writes, value=user)

    def logout(self):
        previous = self._current_user
        self._current_user = None
        result = self._publish([(CURRENT_USER_KEY, None, "Failed to logout")])
        if previous:
            logging.info(f"User '{previous.username}' logged out")
        return result

    # --------------------------------------------------------------------------
    # Directory mutations
    # --------------------------------------------------------------------------
    def update_user(self, user):
        if user is None or not user.id or not user.username:
            self._reject("Invalid user data")
        if user.id in user.followers or user.id in user.following:
            self._reject("Users cannot follow themselves")

        existing = self.get_user(user.id)
        if existing is None:
            logging.debug(f"update_user: no user with id {user.id}")
            return self._unchanged()
        if existing.username != user.username:
            self._reject("Username cannot be changed")

        self._users = tuple(user if u.id == user.id else u for u in self._users)
        writes = [self._users_write()]
        if self._current_user and self._current_user.id == user.id:
            self._current_user = user
            writes.append(self._session_write())
        return self._publish(writes, value=user)

    def update_bio(self, user_id, bio):
        user = self.get_user(user_id)
        if user is None:
            if not user_id:
                self._reject("Invalid user data")
            return self._unchanged()
        return self.update_user(user.replace(bio=bio))

    def toggle_follow(self, actor_id, target_id):
        if not actor_id or not target_id:
            self._reject("Follower and followed user are required")
        if actor_id == target_id:
            self._reject("Users cannot follow themselves")

        actor = self.get_user(actor_id)
        target = self.get_user(target_id)
        if actor is None or target is None:
            logging.debug(f"toggle_follow: unknown user in ({actor_id}, {target_id})")
            return self._unchanged()

        unfollowing = actor.is_following(target_id)
        new_actor = actor.replace(following=toggle_membership(actor.following, target_id))
        if unfollowing:
            followers = tuple(f for f in target.followers if f != actor_id)
        else:
            followers = target.followers if actor_id in target.followers else target.followers + (actor_id,)
        new_target = target.replace(followers=followers)

        replaced = {actor_id: new_actor, target_id: new_target}
        self._users = tuple(replaced.get(u.id, u) for u in self._users)
        writes = [self._users_write()]
        if self._current_user and self._current_user.id in replaced:
            self._current_user = replaced[self._current_user.id]
            writes.append(self._session_write())

        logging.info(
            f"{actor.username} {'unfollowed' if unfollowing else 'followed'} {target.username}"
        )
        return self._publish(writes, value=new_actor)
