"""
Weekly posting quota tests.
"""
from unittest.mock import MagicMock

from src.db.database import ProfileDB
from src.errors import RemoteFailure
from src.feed.quota import check_weekly_quota, weekly_limit
from src.feed.repository import to_profile


def test_limits_by_role():
    assert weekly_limit("admin") is None
    assert weekly_limit("leader") == 4
    assert weekly_limit("member") == 3


def test_member_with_three_posts_denied(repository, profiles, add_post):
    member = profiles["member"]
    for hours in (1, 30, 100):
        add_post(member.id, hours_ago=hours)

    assert check_weekly_quota(repository, member) is False


def test_member_with_two_posts_allowed(repository, profiles, add_post):
    member = profiles["member"]
    add_post(member.id, hours_ago=1)
    add_post(member.id, hours_ago=2)

    assert check_weekly_quota(repository, member) is True


def test_posts_outside_window_do_not_count(repository, profiles, add_post):
    member = profiles["member"]
    add_post(member.id, hours_ago=1)
    add_post(member.id, hours_ago=2)
    add_post(member.id, hours_ago=7 * 24 + 1)
    add_post(member.id, hours_ago=30 * 24)

    assert check_weekly_quota(repository, member) is True


def test_other_authors_do_not_count(repository, profiles, add_post):
    for _ in range(5):
        add_post(profiles["other"].id, hours_ago=1)

    assert check_weekly_quota(repository, profiles["member"]) is True


def test_leader_with_four_posts_denied(repository, profiles, add_post):
    leader = profiles["leader"]
    for hours in range(3):
        add_post(leader.id, hours_ago=hours)
    assert check_weekly_quota(repository, leader) is True

    add_post(leader.id, hours_ago=5)
    assert check_weekly_quota(repository, leader) is False


def test_admin_never_denied(repository, profiles, add_post):
    admin = profiles["admin"]
    for hours in range(20):
        add_post(admin.id, hours_ago=hours)

    assert check_weekly_quota(repository, admin) is True


def test_counting_error_fails_open(profiles):
    repository = MagicMock()
    repository.count_posts_since.side_effect = RemoteFailure("Erro ao contar publicações", "db down")

    assert check_weekly_quota(repository, profiles["member"]) is True


def test_unknown_role_gets_member_limit(repository, seed, add_post):
    seed(ProfileDB(id="pastor-1", full_name="Paulo Pastor", email="paulo@iprsinop.org", role="pastor"))
    profile = repository.get_profile("pastor-1")
    assert profile.role == "member"
    assert not profile.can_moderate

    for hours in (1, 2, 3):
        add_post(profile.id, hours_ago=hours)
    assert check_weekly_quota(repository, profile) is False


def test_unknown_status_reads_as_inactive():
    row = ProfileDB(id="p-1", full_name="Sem Status", email="", role="member", status="suspenso")
    assert to_profile(row).is_active is False
