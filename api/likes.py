from __future__ import annotations

from flask import Blueprint, jsonify, g

from models import storage
from models.base_model import is_uuid
from models.like import Like
from models.video import Video
from utils.decorators import jwt_required
from utils.exceptions import NotFoundError, ValidationError

bp = Blueprint("likes", __name__)


@bp.post("/toggle/v/<video_id>")
@jwt_required()
def toggle_video_like(video_id: str):
    """
    Like a video, or remove the like if the current user already liked it
    ---
    tags:
      - Likes
    security:
      - Bearer: []
    parameters:
      - { in: path, name: video_id, type: string, required: true }
    responses:
      200: { description: "isLiked reflects the new state" }
      400: { description: Invalid video ID }
      404: { description: Video not found }
    """
    if not is_uuid(video_id):
        raise ValidationError("Invalid video ID")

    session = storage.get_session()
    if storage.get(Video, video_id) is None:
        raise NotFoundError("Video not found")

    existing = (
        session.query(Like)
        .filter(Like.video_id == video_id, Like.liked_by_id == g.current_user.id)
        .first()
    )
    if existing:
        storage.delete(existing)
        storage.save()
        return jsonify({"data": {"isLiked": False}, "message": "Video unliked successfully"}), 200

    storage.new(Like(video_id=video_id, liked_by_id=g.current_user.id))
    storage.save()
    return jsonify({"data": {"isLiked": True}, "message": "Video liked successfully"}), 200
