from __future__ import annotations

import math

from flask import Blueprint, jsonify, g
from sqlalchemy import func, select

from models import storage
from models.like import Like
from models.subscription import Subscription
from models.video import Video
from models.schemas.video import ChannelStatsSchema, VideoOutSchema
from api.utils.request_args import parse_pagination, parse_sort
from utils.decorators import jwt_required

bp = Blueprint("dashboard", __name__)

stats_schema = ChannelStatsSchema()
video_out_schema = VideoOutSchema()

# Likes per video, correlated against the outer Video row
likes_count = (
    select(func.count(Like.id))
    .where(Like.video_id == Video.id)
    .correlate(Video)
    .scalar_subquery()
)

# Sorting allowlist: API field -> SQL expression
SORT_COLUMNS = {
    "createdAt": Video.created_at,
    "updatedAt": Video.updated_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
    "likesCount": likes_count,
}


def channel_stats(session, channel_id: str) -> dict:
    total_videos, total_views = (
        session.query(func.count(Video.id), func.coalesce(func.sum(Video.views), 0))
        .filter(Video.owner_id == channel_id)
        .one()
    )
    total_likes = (
        session.query(func.count(Like.id))
        .join(Video, Like.video_id == Video.id)
        .filter(Video.owner_id == channel_id)
        .scalar()
    )
    total_subscribers = (
        session.query(func.count(Subscription.id))
        .filter(Subscription.channel_id == channel_id)
        .scalar()
    )
    return {
        "total_videos": total_videos,
        "total_views": int(total_views),
        "total_likes": total_likes,
        "total_subscribers": total_subscribers,
    }


@bp.get("/stats")
@jwt_required()
def get_channel_stats():
    """
    Totals for the authenticated user's channel
    ---
    tags:
      - Dashboard
    security:
      - Bearer: []
    responses:
      200:
        description: totalVideos, totalViews, totalLikes, totalSubscribers
    """
    stats = channel_stats(storage.get_session(), g.current_user.id)
    return jsonify({"data": stats_schema.dump(stats), "message": "Channel stats fetched successfully"}), 200


@bp.get("/videos")
@jwt_required()
def get_channel_videos():
    """
    Paginated videos of the authenticated user's channel, with like counts
    ---
    tags:
      - Dashboard
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
      - in: query
        name: sortBy
        type: string
        default: createdAt
        description: "Allowed: createdAt, updatedAt, views, duration, title, likesCount"
      - { in: query, name: sortType, type: string, default: desc, enum: [asc, desc] }
    responses:
      200:
        description: videos + pagination block
      400:
        description: Bad pagination or sort field
    """
    session = storage.get_session()
    channel_id = g.current_user.id
    page, limit = parse_pagination(default_limit=10)
    order_by = parse_sort(SORT_COLUMNS, default_field="createdAt")

    rows = (
        session.query(Video, likes_count.label("likes_count"))
        .filter(Video.owner_id == channel_id)
        .order_by(order_by, Video.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    total_videos = session.query(func.count(Video.id)).filter(Video.owner_id == channel_id).scalar()
    total_pages = math.ceil(total_videos / limit)

    videos = []
    for video, count in rows:
        item = video_out_schema.dump(video)
        item["likesCount"] = count
        videos.append(item)

    return jsonify(
        {
            "data": {
                "videos": videos,
                "pagination": {
                    "currentPage": page,
                    "totalPages": total_pages,
                    "totalVideos": total_videos,
                    "hasNextPage": page < total_pages,
                    "hasPrevPage": page > 1,
                    "limit": limit,
                },
            },
            "message": "Channel videos fetched successfully",
        }
    ), 200
