"""
Weekly posting quota.

Members may publish 3 posts and leaders 4 within any trailing 7-day window;
admins are not limited. Failing to count posts never blocks the author.
"""
import logging
from datetime import datetime, timedelta

from src.errors import RemoteFailure

QUOTA_WINDOW = timedelta(days=7)
WEEKLY_LIMITS = {
    "admin": None,
    "leader": 4,
    "member": 3,
}

logger = logging.getLogger(__name__)


def weekly_limit(role):
    return WEEKLY_LIMITS[role]


def check_weekly_quota(repository, profile, now=None):
    """Return True when the profile may publish one more post."""
    limit = weekly_limit(profile.role)
    if limit is None:
        return True

    since = (now or datetime.utcnow()) - QUOTA_WINDOW
    try:
        count = repository.count_posts_since(profile.id, since)
    except RemoteFailure as e:
        logger.warning(f"Could not count posts for {profile.id}, allowing the post: {e}")
        return True

    return count < limit


def quota_message(role):
    if role == "member":
        return "Membros podem publicar 3 vezes por semana."
    return "Você alcançou seu limite semanal."
