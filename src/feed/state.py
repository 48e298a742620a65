"""
Pure transformations over the in-memory list of feed posts.

Every function takes the current list and returns a new one; nothing here talks to
the database. The reconciler applies them once the matching remote write succeeded.
"""
from typing import List

from src.models.feed import Post, Like, Comment


def sort_posts(posts: List[Post]) -> List[Post]:
    """Pinned posts first, newest first within each group."""
    return sorted(posts, key=lambda p: (p.is_pinned, p.created_at), reverse=True)


def replace_post_list(page: List[Post]) -> List[Post]:
    return list(page)


def append_page(posts: List[Post], page: List[Post]) -> List[Post]:
    known = {p.id for p in posts}
    return posts + [p for p in page if p.id not in known]


def _update(posts, post_id, func):
    return [func(p) if p.id == post_id else p for p in posts]


def add_like(posts: List[Post], post_id: str, like: Like) -> List[Post]:
    def apply(post):
        if post.liked_by(like.user_id):
            return post
        return post.model_copy(update={"likes": post.likes + [like]})
    return _update(posts, post_id, apply)


def remove_like(posts: List[Post], post_id: str, user_id: str) -> List[Post]:
    def apply(post):
        return post.model_copy(update={"likes": [l for l in post.likes if l.user_id != user_id]})
    return _update(posts, post_id, apply)


def append_comment(posts: List[Post], post_id: str, comment: Comment) -> List[Post]:
    def apply(post):
        comments = sorted(post.comments + [comment], key=lambda c: c.created_at)
        return post.model_copy(update={"comments": comments})
    return _update(posts, post_id, apply)


def replace_comment(posts: List[Post], post_id: str, comment_id: str, content: str) -> List[Post]:
    def apply(post):
        comments = [c.model_copy(update={"content": content}) if c.id == comment_id else c for c in post.comments]
        return post.model_copy(update={"comments": comments})
    return _update(posts, post_id, apply)


def remove_comment(posts: List[Post], post_id: str, comment_id: str) -> List[Post]:
    def apply(post):
        return post.model_copy(update={"comments": [c for c in post.comments if c.id != comment_id]})
    return _update(posts, post_id, apply)


def replace_content(posts: List[Post], post_id: str, content: str) -> List[Post]:
    return _update(posts, post_id, lambda p: p.model_copy(update={"content": content}))


def remove_post(posts: List[Post], post_id: str) -> List[Post]:
    return [p for p in posts if p.id != post_id]


def set_pinned(posts: List[Post], post_id: str, pinned: bool) -> List[Post]:
    return sort_posts(_update(posts, post_id, lambda p: p.model_copy(update={"is_pinned": pinned})))
