import unittest

import feed
from identity_store import IdentityStore
from post import Post
from posts_store import PostsStore
from substrate import MemorySubstrate
from user import User

from substrate_fixtures import fixed_clock, sequential_ids


def make_post(post_id, user_id, timestamp, content="text"):
    return Post(post_id, user_id, content, timestamp)


class TestFilterAndSort(unittest.TestCase):
    def setUp(self):
        self.me = User("me", "me", following=("friend",))
        self.posts = (
            make_post("p1", "stranger", 3),
            make_post("p2", "friend", 1),
            make_post("p3", "me", 2),
        )

    def test_following_only(self):
        ids = [p.id for p in feed.filter_feed(self.posts, self.me, following_only=True)]
        self.assertEqual(ids, ["p2", "p3"])

    def test_all_posts(self):
        self.assertEqual(len(feed.filter_feed(self.posts, self.me, following_only=False)), 3)

    def test_no_session_shows_nothing_when_following_only(self):
        self.assertEqual(feed.filter_feed(self.posts, None, following_only=True), ())

    def test_sort_descending_by_timestamp(self):
        ids = [p.id for p in feed.sort_by_recency(self.posts)]
        self.assertEqual(ids, ["p1", "p3", "p2"])

    def test_ties_keep_insertion_order(self):
        posts = (make_post("a", "x", 5), make_post("b", "x", 5), make_post("c", "x", 6))
        ids = [p.id for p in feed.sort_by_recency(posts)]
        self.assertEqual(ids, ["c", "a", "b"])

    def test_sorting_does_not_touch_input(self):
        feed.sort_by_recency(self.posts)
        self.assertEqual([p.id for p in self.posts], ["p1", "p2", "p3"])


class TestPagination(unittest.TestCase):
    def setUp(self):
        self.posts = tuple(make_post(f"p{i}", "u", 100 - i) for i in range(12))

    def test_cursor_grows_by_page_size(self):
        cursor = feed.FeedCursor(page_size=5)
        page = cursor.page(self.posts)
        self.assertEqual(len(page.posts), 5)
        self.assertTrue(page.has_more)

        cursor.load_more()
        cursor.load_more()
        page = cursor.page(self.posts)
        self.assertEqual(len(page.posts), 12)
        self.assertFalse(page.has_more)
        self.assertEqual(page.total, 12)

    def test_reset(self):
        cursor = feed.FeedCursor(page_size=3)
        cursor.load_more()
        cursor.reset()
        self.assertEqual(cursor.visible, 3)

    def test_build_feed(self):
        me = User("u", "u")
        page = feed.build_feed(self.posts, me, following_only=True, visible=4)
        self.assertEqual([p.id for p in page.posts], ["p0", "p1", "p2", "p3"])
        self.assertTrue(page.has_more)

    def test_exact_fit_has_no_more(self):
        page = feed.paginate(self.posts[:5], 5)
        self.assertFalse(page.has_more)


class TestProfile(unittest.TestCase):
    def setUp(self):
        self.alice = User("a", "alice", followers=("b",))
        self.bob = User("b", "bob", following=("a",))
        self.users = (self.alice, self.bob)
        self.posts = (
            make_post("p1", "a", 1),
            make_post("p2", "b", 2),
            make_post("p3", "a", 3),
        )

    def test_profile_aggregates(self):
        profile = feed.build_profile("alice", self.users, self.posts, session_user=self.bob)
        self.assertEqual([p.id for p in profile.posts], ["p3", "p1"])
        self.assertEqual(profile.follower_count, 1)
        self.assertEqual(profile.following_count, 0)
        self.assertEqual(profile.post_count, 2)
        self.assertFalse(profile.is_current_user)
        self.assertTrue(profile.is_following)

    def test_own_profile(self):
        profile = feed.build_profile("bob", self.users, self.posts, session_user=self.bob)
        self.assertTrue(profile.is_current_user)
        self.assertFalse(profile.is_following)

    def test_unknown_profile(self):
        self.assertIsNone(feed.build_profile("carol", self.users, self.posts))


class TestAuthorsAndDisplay(unittest.TestCase):
    def test_dangling_author(self):
        users = (User("a", "alice"),)
        self.assertIsNone(feed.resolve_author(users, "gone"))
        self.assertEqual(feed.author_label(users, "gone"), feed.UNKNOWN_AUTHOR)
        self.assertEqual(feed.author_label(users, "a"), "alice")

    def test_display_truncates_long_content(self):
        content = "x" * 281
        self.assertEqual(feed.display_content(content), "x" * 280 + "...")
        self.assertEqual(feed.display_content(content, expanded=True), content)
        self.assertEqual(feed.display_content("short"), "short")

    def test_characters_left(self):
        self.assertEqual(feed.characters_left("hello"), 275)
        self.assertLess(feed.characters_left("x" * 281), 0)


class TestScenarios(unittest.TestCase):
    def setUp(self):
        substrate = MemorySubstrate()
        self.identity = IdentityStore(substrate, id_factory=sequential_ids("user"))
        self.posts = PostsStore(substrate, id_factory=sequential_ids("post"), clock=fixed_clock())

    def test_alice_posts_hello(self):
        alice = self.identity.login("alice").value
        self.posts.create_post(alice.id, "hello")

        self.assertEqual(len(self.posts.posts), 1)
        post = self.posts.posts[0]
        self.assertEqual(post.content, "hello")
        self.assertEqual(len(post.likes), 0)
        self.assertEqual(len(post.comments), 0)

    def test_bob_follows_alice_and_sees_her_posts(self):
        alice = self.identity.login("alice").value
        self.posts.create_post(alice.id, "from alice")
        bob = self.identity.login("bob").value
        carol = self.identity.login("carol").value
        self.posts.create_post(carol.id, "from carol")
        self.identity.login("bob")

        self.identity.toggle_follow(bob.id, alice.id)

        bob = self.identity.current_user
        self.assertIn(alice.id, bob.following)
        self.assertIn(bob.id, self.identity.get_user(alice.id).followers)

        page = feed.build_feed(self.posts.posts, bob, following_only=True, visible=5)
        self.assertEqual([p.content for p in page.posts], ["from alice"])

    def test_feed_reflects_store_mutations(self):
        alice = self.identity.login("alice").value
        self.posts.create_post(alice.id, "one")
        page = feed.build_feed(self.posts.posts, alice, visible=5)
        self.assertEqual(page.total, 1)

        self.posts.create_post(alice.id, "two")
        page = feed.build_feed(self.posts.posts, alice, visible=5)
        self.assertEqual([p.content for p in page.posts], ["two", "one"])


if __name__ == "__main__":
    unittest.main()
