"""
Feed state transformation tests. No database involved.
"""
from datetime import datetime, timedelta

from src.feed import state
from src.models.feed import Comment, Like, Post

NOW = datetime(2026, 10, 19, 12, 0, 0)


def make_post(post_id, hours_ago=0, pinned=False, **kwargs):
    return Post(id=post_id, author_id="member-1", created_at=NOW - timedelta(hours=hours_ago),
                is_pinned=pinned, **kwargs)


def make_comment(comment_id, post_id, hours_ago):
    return Comment(id=comment_id, post_id=post_id, author_id="member-2", content=comment_id,
                   created_at=NOW - timedelta(hours=hours_ago))


class TestOrdering:
    def test_pinned_before_newer_unpinned(self):
        p1 = make_post("p1", hours_ago=48, pinned=True)
        p2 = make_post("p2", hours_ago=1)
        assert [p.id for p in state.sort_posts([p2, p1])] == ["p1", "p2"]

    def test_newest_first_within_groups(self):
        posts = [
            make_post("old", hours_ago=10),
            make_post("pinned-old", hours_ago=30, pinned=True),
            make_post("new", hours_ago=1),
            make_post("pinned-new", hours_ago=20, pinned=True),
        ]
        assert [p.id for p in state.sort_posts(posts)] == ["pinned-new", "pinned-old", "new", "old"]


class TestPin:
    def test_pin_moves_to_front_and_keeps_timestamp(self):
        posts = [make_post("a", hours_ago=1), make_post("b", hours_ago=5)]
        created_at = posts[1].created_at

        result = state.set_pinned(posts, "b", True)

        assert result[0].id == "b"
        assert result[0].is_pinned is True
        assert result[0].created_at == created_at
        # input list untouched
        assert posts[1].is_pinned is False

    def test_unpin_returns_to_date_order(self):
        posts = [make_post("b", hours_ago=5, pinned=True), make_post("a", hours_ago=1)]
        result = state.set_pinned(posts, "b", False)
        assert [p.id for p in result] == ["a", "b"]

    def test_pinned_stays_first_after_other_changes(self):
        posts = state.sort_posts([make_post("p1", hours_ago=48, pinned=True), make_post("p2", hours_ago=1)])
        posts = state.replace_content(posts, "p2", "editado")
        posts = state.add_like(posts, "p2", Like(user_id="u1"))
        posts = state.set_pinned(posts, "p2", False)
        assert posts[0].id == "p1"


class TestLikes:
    def test_one_like_per_user(self):
        posts = [make_post("a")]
        posts = state.add_like(posts, "a", Like(user_id="u1"))
        posts = state.add_like(posts, "a", Like(user_id="u1"))
        assert [l.user_id for l in posts[0].likes] == ["u1"]

    def test_remove_only_that_user(self):
        posts = [make_post("a", likes=[Like(user_id="u1"), Like(user_id="u2")])]
        posts = state.remove_like(posts, "a", "u1")
        assert [l.user_id for l in posts[0].likes] == ["u2"]

    def test_other_posts_untouched(self):
        posts = [make_post("a"), make_post("b", hours_ago=1)]
        result = state.add_like(posts, "a", Like(user_id="u1"))
        assert result[1] is posts[1]


class TestComments:
    def test_kept_in_creation_order(self):
        posts = [make_post("a", comments=[make_comment("c2", "a", 1)])]
        posts = state.append_comment(posts, "a", make_comment("c1", "a", 3))
        posts = state.append_comment(posts, "a", make_comment("c3", "a", 0))
        assert [c.id for c in posts[0].comments] == ["c1", "c2", "c3"]

    def test_replace_comment_keeps_position(self):
        posts = [make_post("a", comments=[make_comment("c1", "a", 3), make_comment("c2", "a", 1)])]
        result = state.replace_comment(posts, "a", "c1", "editado")
        assert [(c.id, c.content) for c in result[0].comments] == [("c1", "editado"), ("c2", "c2")]
        assert posts[0].comments[0].content == "c1"

    def test_remove_comment(self):
        posts = [
            make_post("a", comments=[make_comment("c1", "a", 3), make_comment("c2", "a", 1)]),
            make_post("b", hours_ago=2, comments=[make_comment("c3", "b", 2)]),
        ]
        result = state.remove_comment(posts, "a", "c1")
        assert [c.id for c in result[0].comments] == ["c2"]
        assert [c.id for c in result[1].comments] == ["c3"]


class TestListChanges:
    def test_append_page_skips_known_posts(self):
        first = [make_post("a"), make_post("b", hours_ago=1)]
        second = [make_post("b", hours_ago=1), make_post("c", hours_ago=2)]
        assert [p.id for p in state.append_page(first, second)] == ["a", "b", "c"]

    def test_replace_post_list(self):
        page = [make_post("x")]
        result = state.replace_post_list(page)
        assert result == page and result is not page

    def test_remove_post(self):
        posts = [make_post("a"), make_post("b", hours_ago=1)]
        assert [p.id for p in state.remove_post(posts, "a")] == ["b"]

    def test_replace_content(self):
        posts = state.replace_content([make_post("a", content="antes")], "a", "depois")
        assert posts[0].content == "depois"
