from __future__ import annotations

from flask import Blueprint, jsonify
from sqlalchemy.orm import joinedload

from models import storage
from models.base_model import is_uuid
from models.comment import Comment
from models.schemas.comment import CommentOutSchema
from api.utils.request_args import parse_pagination
from utils.exceptions import ValidationError

bp = Blueprint("comments", __name__)

comments_out_schema = CommentOutSchema(many=True)


@bp.get("/<video_id>")
def get_video_comments(video_id: str):
    """
    Comments on a video, newest first, each with its author's public profile
    ---
    tags:
      - Comments
    parameters:
      - { in: path, name: video_id, type: string, required: true }
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: OK }
      400: { description: Invalid video ID }
    """
    if not is_uuid(video_id):
        raise ValidationError("Invalid video ID")

    session = storage.get_session()
    page, limit = parse_pagination(default_limit=10)

    query = session.query(Comment).filter(Comment.video_id == video_id)
    total = query.count()
    rows = (
        query.options(joinedload(Comment.owner))
        .order_by(Comment.created_at.desc(), Comment.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "data": comments_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
            "message": "Comments fetched successfully",
        }
    ), 200
