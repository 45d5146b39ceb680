from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models import storage
from models.like import Like
from models.subscription import Subscription
from models.video import Video

API = "/api/v1"


def _video(owner, title: str, views: int = 0, age_minutes: int = 0) -> Video:
    created = datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
    video = Video(
        title=title,
        description=f"{title} description",
        video_file=f"https://res.cloudinary.com/demo/video/upload/v1/{title}.mp4",
        thumbnail=f"https://res.cloudinary.com/demo/image/upload/v1/{title}.png",
        duration=60.0,
        views=views,
        owner_id=owner.id,
        created_at=created,
        updated_at=created,
    )
    storage.new(video)
    return video


@pytest.fixture
def channel(alice, make_user):
    """alice owns three videos; bob and carol like some of them and subscribe."""
    bob = make_user(username="bob", email="bob@x.com")
    carol = make_user(username="carol", email="carol@x.com")
    first = _video(alice, "first", views=10, age_minutes=30)
    second = _video(alice, "second", views=5, age_minutes=20)
    third = _video(alice, "third", views=0, age_minutes=10)
    storage.save()

    storage.new(Like(video_id=first.id, liked_by_id=bob.id))
    storage.new(Like(video_id=first.id, liked_by_id=carol.id))
    storage.new(Like(video_id=second.id, liked_by_id=bob.id))
    storage.new(Subscription(subscriber_id=bob.id, channel_id=alice.id))
    storage.new(Subscription(subscriber_id=carol.id, channel_id=alice.id))
    storage.save()
    return {"first": first, "second": second, "third": third, "bob": bob}


def test_stats_totals(client, channel, auth_headers) -> None:
    response = client.get(f"{API}/dashboard/stats", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["data"] == {
        "totalVideos": 3,
        "totalViews": 15,
        "totalLikes": 3,
        "totalSubscribers": 2,
    }


def test_stats_for_channel_without_videos_still_counts_subscribers(client, alice, make_user, login) -> None:
    bob = make_user(username="bob", email="bob@x.com")
    storage.new(Subscription(subscriber_id=alice.id, channel_id=bob.id))
    storage.save()
    headers = {"Authorization": f"Bearer {login('bob')['accessToken']}"}

    response = client.get(f"{API}/dashboard/stats", headers=headers)

    assert response.get_json()["data"] == {
        "totalVideos": 0,
        "totalViews": 0,
        "totalLikes": 0,
        "totalSubscribers": 1,
    }


def test_stats_requires_authentication(client) -> None:
    assert client.get(f"{API}/dashboard/stats").status_code == 401


def test_videos_default_newest_first_with_likes(client, channel, auth_headers) -> None:
    response = client.get(f"{API}/dashboard/videos", headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert [v["title"] for v in data["videos"]] == ["third", "second", "first"]
    assert [v["likesCount"] for v in data["videos"]] == [0, 1, 2]
    assert data["pagination"] == {
        "currentPage": 1,
        "totalPages": 1,
        "totalVideos": 3,
        "hasNextPage": False,
        "hasPrevPage": False,
        "limit": 10,
    }


def test_videos_pagination(client, channel, auth_headers) -> None:
    response = client.get(f"{API}/dashboard/videos?page=2&limit=2", headers=auth_headers)

    data = response.get_json()["data"]
    assert [v["title"] for v in data["videos"]] == ["first"]
    assert data["pagination"]["totalPages"] == 2
    assert data["pagination"]["hasNextPage"] is False
    assert data["pagination"]["hasPrevPage"] is True


@pytest.mark.parametrize(
    "query, expected",
    [
        ("sortBy=views&sortType=asc", ["third", "second", "first"]),
        ("sortBy=likesCount&sortType=desc", ["first", "second", "third"]),
        ("sortBy=title&sortType=asc", ["first", "second", "third"]),
    ],
)
def test_videos_sorting(client, channel, auth_headers, query, expected) -> None:
    response = client.get(f"{API}/dashboard/videos?{query}", headers=auth_headers)

    assert [v["title"] for v in response.get_json()["data"]["videos"]] == expected


def test_videos_rejects_unknown_sort_field(client, channel, auth_headers) -> None:
    response = client.get(f"{API}/dashboard/videos?sortBy=password", headers=auth_headers)

    assert response.status_code == 400


def test_videos_rejects_non_integer_page(client, alice, auth_headers) -> None:
    response = client.get(f"{API}/dashboard/videos?page=two", headers=auth_headers)

    assert response.status_code == 400


def test_videos_only_lists_own_channel(client, channel, login) -> None:
    headers = {"Authorization": f"Bearer {login('bob')['accessToken']}"}

    data = client.get(f"{API}/dashboard/videos", headers=headers).get_json()["data"]

    assert data["videos"] == []
    assert data["pagination"]["totalVideos"] == 0
    assert data["pagination"]["totalPages"] == 0


def test_videos_rejects_page_past_bound(client, alice, auth_headers) -> None:
    response = client.get(f"{API}/dashboard/videos?page=99999999999999999999", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["error"] == "BAD_REQUEST"
