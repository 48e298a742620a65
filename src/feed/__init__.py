"""
Feed Module
---------
Social feed of the church: posts, likes, comments and pinning.
Keeps a client-side projection of the feed in sync with the database and
enforces the weekly posting quota.
"""
