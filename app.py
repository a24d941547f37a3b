import tkinter as tk
from tkinter import messagebox, scrolledtext
import sys
import signal
import logging

import config
import feed
from start import create_services
from store import ValidationError


class SocialSparkGUI:
    def __init__(self, root, identity, posts):
        self.root = root
        self.root.title("SocialSpark")
        self.main_frame = tk.Frame(root)
        self.main_frame.pack(padx=20, pady=20, fill="both", expand=True)

        self.identity = identity
        self.posts = posts

        self.following_only = True
        self.cursor = feed.FeedCursor()
        self.current_screen = None
        self.post_windows = {}

        self._unsubscribe = [
            self.identity.subscribe(self.on_store_change),
            self.posts.subscribe(self.on_store_change),
        ]

        if self.identity.current_user:
            self.show_screen(self.feed_menu)
        else:
            self.login_menu()
        self.root.protocol("WM_DELETE_WINDOW", self.on_exit)

    def on_store_change(self, snapshot, error):
        # re-render after the current Tk callback has returned
        if self.current_screen:
            self.root.after_idle(self.current_screen)
        for post_id, refresh in list(self.post_windows.items()):
            self.root.after_idle(refresh)

    def clear_frame(self):
        for widget in self.main_frame.winfo_children():
            widget.destroy()

    def show_screen(self, screen):
        self.current_screen = screen
        screen()

    def run_action(self, action, *args):
        """
        Calls a store operation and reports failures.
        Returns the StoreResult, or None when validation rejected the input.
        """
        try:
            result = action(*args)
        except ValidationError as e:
            messagebox.showerror("Error", str(e))
            return None
        if not result.ok:
            messagebox.showwarning("Not saved", result.persistence_error.message)
        return result

    def error_banner(self):
        for message in (self.identity.error, self.posts.error):
            if message:
                tk.Label(self.main_frame, text=message, fg="red").pack(pady=2)

    # --------------------------------------------------------------------------
    # LOGIN
    # --------------------------------------------------------------------------
    def login_menu(self):
        self.current_screen = None
        self.clear_frame()
        tk.Label(self.main_frame, text="Welcome to SocialSpark", font=("Arial", 14)).pack(pady=10)

        tk.Label(self.main_frame, text="Username:").pack()
        self.username_entry = tk.Entry(self.main_frame)
        self.username_entry.pack()
        self.username_entry.bind("<Return>", lambda e: self.attempt_login())

        tk.Button(
            self.main_frame, text="Login", command=self.attempt_login, width=20
        ).pack(pady=5)

    def attempt_login(self):
        result = self.run_action(self.identity.login, self.username_entry.get())
        if result is not None:
            self.cursor.reset()
            self.show_screen(self.feed_menu)

    def logout(self):
        self.identity.logout()
        self.login_menu()

    # --------------------------------------------------------------------------
    # FEED
    # --------------------------------------------------------------------------
    def nav_bar(self):
        nav = tk.Frame(self.main_frame)
        nav.pack(fill="x", pady=5)
        me = self.identity.current_user
        tk.Button(nav, text="Feed", command=lambda: self.show_screen(self.feed_menu)).pack(side="left", padx=2)
        tk.Button(nav, text="Search", command=lambda: self.show_screen(self.search_users_menu)).pack(side="left", padx=2)
        if me:
            tk.Button(
                nav, text="My Profile", command=lambda: self.open_profile(me.username)
            ).pack(side="left", padx=2)
        tk.Button(nav, text="Logout", command=self.logout).pack(side="right", padx=2)

    def feed_menu(self):
        me = self.identity.current_user
        if me is None:
            self.login_menu()
            return
        self.clear_frame()
        self.nav_bar()
        tk.Label(self.main_frame, text=f"Welcome, {me.username}!", font=("Arial", 14)).pack(pady=5)

        tk.Button(
            self.main_frame,
            text="Following" if self.following_only else "All Posts",
            command=self.toggle_feed_filter,
            width=20,
        ).pack(pady=2)

        self.composer()
        self.error_banner()

        page = self.cursor.page(
            feed.sort_by_recency(feed.filter_feed(self.posts.posts, me, self.following_only))
        )
        if page.total == 0:
            text = "No posts from people you follow yet." if self.following_only else "No posts available."
            tk.Label(self.main_frame, text=text, fg="gray").pack(pady=10)
        self.display_posts(self.main_frame, page.posts)
        if page.has_more:
            tk.Button(
                self.main_frame, text="Load More Posts", command=self.load_more, width=20
            ).pack(pady=5)

    def toggle_feed_filter(self):
        self.following_only = not self.following_only
        self.feed_menu()

    def load_more(self):
        self.cursor.load_more()
        self.feed_menu()

    def composer(self):
        frame = tk.Frame(self.main_frame)
        frame.pack(fill="x", pady=5)
        self.post_content_text = scrolledtext.ScrolledText(frame, width=50, height=3, wrap=tk.WORD)
        self.post_content_text.pack(fill="x")
        counter = tk.Label(frame, text=str(feed.MAX_CONTENT_LENGTH))
        counter.pack(side="left")

        def update_counter(event=None):
            left = feed.characters_left(self.post_content_text.get("1.0", "end-1c"))
            counter.config(text=str(left), fg="red" if left < 0 else "black")

        self.post_content_text.bind("<KeyRelease>", update_counter)

        tk.Label(frame, text="Image URL:").pack(side="left", padx=(10, 0))
        self.image_url_entry = tk.Entry(frame, width=25)
        self.image_url_entry.pack(side="left")
        tk.Button(frame, text="Post", command=self.attempt_create_post).pack(side="right")

    def attempt_create_post(self):
        me = self.identity.current_user
        content = self.post_content_text.get("1.0", "end-1c").strip()
        if feed.characters_left(content) < 0:
            messagebox.showerror("Error", f"Posts are limited to {feed.MAX_CONTENT_LENGTH} characters.")
            return
        image_url = self.image_url_entry.get().strip() or None
        self.run_action(self.posts.create_post, me.id if me else None, content, image_url)

    # --------------------------------------------------------------------------
    # POSTS
    # --------------------------------------------------------------------------
    def display_posts(self, parent, posts):
        users = self.identity.users
        me = self.identity.current_user
        for post in posts:
            post_frame = tk.Frame(parent, relief=tk.RAISED, borderwidth=1)
            post_frame.pack(fill="x", padx=5, pady=5)

            header_frame = tk.Frame(post_frame)
            header_frame.pack(fill="x", padx=5, pady=2)
            author = feed.resolve_author(users, post.user_id)
            tk.Button(
                header_frame,
                text=author.username if author else feed.UNKNOWN_AUTHOR,
                relief=tk.FLAT,
                font=("Arial", 11, "bold"),
                state=tk.NORMAL if author else tk.DISABLED,
                command=lambda name=(author.username if author else None): self.open_profile(name),
            ).pack(side="left")
            tk.Label(
                header_frame, text=feed.format_timestamp(post.timestamp), font=("Arial", 8, "italic")
            ).pack(side="right")

            tk.Label(
                post_frame,
                text=feed.display_content(post.content),
                wraplength=450,
                justify="left",
            ).pack(fill="x", padx=5, pady=2)
            if post.image_url:
                tk.Label(post_frame, text=f"[image] {post.image_url}", fg="blue").pack(anchor="w", padx=5)

            button_frame = tk.Frame(post_frame)
            button_frame.pack(fill="x", padx=5, pady=2)
            liked = me is not None and post.is_liked_by(me.id)
            tk.Button(
                button_frame,
                text=f"{'Unlike' if liked else 'Like'} ({len(post.likes)})",
                command=lambda pid=post.id: self.like_post(pid),
            ).pack(side="left", padx=2)
            tk.Button(
                button_frame,
                text=f"Comments ({len(post.comments)})",
                command=lambda pid=post.id: self.open_post_window(pid),
            ).pack(side="left", padx=2)

    def like_post(self, post_id):
        me = self.identity.current_user
        self.run_action(self.posts.toggle_like, post_id, me.id if me else None)

    def open_post_window(self, post_id):
        if post_id in self.post_windows:
            return
        w = tk.Toplevel(self.root)
        w.geometry("500x450")
        body = tk.Frame(w)
        body.pack(fill="both", expand=True, padx=10, pady=10)

        def refresh():
            post = self.posts.get_post(post_id)
            if post is None or not w.winfo_exists():
                return
            for widget in body.winfo_children():
                widget.destroy()
            users = self.identity.users
            w.title(f"Post by {feed.author_label(users, post.user_id)}")
            txt = scrolledtext.ScrolledText(body, wrap=tk.WORD, width=60, height=6)
            txt.insert(tk.END, post.content)
            txt.config(state=tk.DISABLED)
            txt.pack(pady=5)

            for c in post.comments:
                tk.Label(
                    body,
                    text=f"{feed.author_label(users, c.user_id)}: {c.content}",
                    wraplength=440,
                    justify="left",
                ).pack(anchor="w")

            entry = tk.Entry(body, width=50)
            entry.pack(pady=5)
            tk.Button(
                body,
                text="Comment",
                command=lambda: self.attempt_comment(post_id, entry.get()),
            ).pack()

        def on_close():
            self.post_windows.pop(post_id, None)
            w.destroy()

        w.protocol("WM_DELETE_WINDOW", on_close)
        self.post_windows[post_id] = refresh
        refresh()

    def attempt_comment(self, post_id, text):
        me = self.identity.current_user
        if me is None or not text.strip():
            return
        self.run_action(self.posts.comment, post_id, me.id, text)

    # --------------------------------------------------------------------------
    # PROFILE
    # --------------------------------------------------------------------------
    def open_profile(self, username):
        if username is None:
            return
        self.show_screen(lambda: self.profile_menu(username))

    def profile_menu(self, username):
        self.clear_frame()
        self.nav_bar()
        profile = feed.build_profile(
            username, self.identity.users, self.posts.posts, self.identity.current_user
        )
        if profile is None:
            tk.Label(self.main_frame, text="User not found").pack(pady=10)
            return

        tk.Label(self.main_frame, text=profile.user.username, font=("Arial", 16, "bold")).pack(pady=5)
        tk.Label(self.main_frame, text=profile.user.bio or "No bio yet", fg="gray").pack()
        tk.Label(
            self.main_frame,
            text=f"{profile.follower_count} Followers   {profile.following_count} Following   {profile.post_count} Posts",
        ).pack(pady=5)

        if profile.is_current_user:
            self.bio_entry = tk.Entry(self.main_frame, width=50)
            self.bio_entry.insert(0, profile.user.bio or "")
            self.bio_entry.pack()
            tk.Button(
                self.main_frame,
                text="Save Bio",
                command=lambda: self.run_action(
                    self.identity.update_bio, profile.user.id, self.bio_entry.get().strip()
                ),
            ).pack(pady=2)
        elif self.identity.current_user:
            tk.Button(
                self.main_frame,
                text="Unfollow" if profile.is_following else "Follow",
                command=lambda: self.run_action(
                    self.identity.toggle_follow, self.identity.current_user.id, profile.user.id
                ),
                width=20,
            ).pack(pady=5)

        self.error_banner()
        self.display_posts(self.main_frame, profile.posts)

    # --------------------------------------------------------------------------
    # SEARCH
    # --------------------------------------------------------------------------
    def search_users_menu(self):
        self.clear_frame()
        self.nav_bar()
        tk.Label(self.main_frame, text="Search Users", font=("Arial", 14)).pack(pady=10)

        self.search_users_entry = tk.Entry(self.main_frame)
        self.search_users_entry.pack()

        listbox_frame = tk.Frame(self.main_frame)
        listbox_frame.pack(pady=10, fill="both", expand=True)
        scrollbar = tk.Scrollbar(listbox_frame, orient="vertical")
        lb = tk.Listbox(listbox_frame, width=60, height=15, yscrollcommand=scrollbar.set)
        scrollbar.config(command=lb.yview)
        scrollbar.pack(side="right", fill="y")
        lb.pack(side="left", fill="both", expand=True)

        results = []

        def update_results(event=None):
            results[:] = self.identity.search_users(self.search_users_entry.get())
            lb.delete(0, "end")
            for user in results:
                lb.insert("end", f"{user.username} - {user.bio}" if user.bio else user.username)

        def on_open(event=None):
            sel = lb.curselection()
            if sel:
                self.open_profile(results[sel[0]].username)

        self.search_users_entry.bind("<KeyRelease>", update_results)
        lb.bind("<Double-Button-1>", on_open)
        update_results()

    def on_exit(self):
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self.root.destroy()


def main():
    config.configure_logging()
    services = create_services()
    root = tk.Tk()
    app = SocialSparkGUI(root, services.identity, services.posts)

    def handle_exit_signal(signum, frame):
        logging.info("Received exit signal. Exiting gracefully...")
        app.on_exit()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_exit_signal)
    signal.signal(signal.SIGTERM, handle_exit_signal)
    root.mainloop()


if __name__ == "__main__":
    main()
