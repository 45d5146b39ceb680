from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models import storage
from models.user import User
from models.schemas.user import UserOutSchema, UserUpdateSchema
from utils import media
from utils.decorators import jwt_required
from utils.exceptions import ConflictError, MediaUploadError, ValidationError

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
user_update_schema = UserUpdateSchema()


def _replace_image(field: str, form_key: str, label: str):
    """
    Upload a new image for the current user, point `field` at it, then drop
    the superseded asset from the media host.
    """
    local_path = media.stash_upload(request.files.get(form_key), current_app.config["UPLOAD_TMP_DIR"])
    if not local_path:
        raise ValidationError(f"{label} file is missing")

    user: User = g.current_user
    old_url = getattr(user, field)

    uploaded = media.upload_on_cloudinary(local_path)
    if not uploaded or not uploaded.get("url"):
        raise MediaUploadError(f"Error while uploading {label.lower()}")

    setattr(user, field, uploaded["url"])
    storage.new(user)
    storage.save()

    if old_url:
        media.delete_from_cloudinary(media.extract_public_id_from_url(old_url))
    return user


@bp.get("/current-user")
@jwt_required()
def current_user():
    """
    Get current user info
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "data": user_out_schema.dump(g.current_user),
            "message": "Current user fetched successfully",
        }
    ), 200


@bp.patch("/update-account")
@jwt_required()
def update_account():
    """
    Update full name and email
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             fullName: { type: string }
             email: { type: string }
    responses:
      200: { description: OK }
      400: { description: All fields are required }
      409: { description: Email already in use }
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    if not payload.get("fullName") or not payload.get("email"):
        raise ValidationError("All fields are required")
    data = user_update_schema.load(payload)

    user: User = g.current_user
    session = storage.get_session()
    taken = session.query(User).filter(User.email == data["email"], User.id != user.id).first()
    if taken:
        raise ConflictError("Email already in use")

    user.full_name = data["full_name"]
    user.email = data["email"]
    storage.new(user)
    storage.save()
    return jsonify({"data": user_out_schema.dump(user), "message": "Account details updated successfully"}), 200


@bp.patch("/avatar")
@jwt_required()
def update_avatar():
    """
    Replace the avatar image
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: avatar, type: file, required: true }
    responses:
      200: { description: OK }
      400: { description: Avatar file missing or upload failed }
    """
    user = _replace_image("avatar", "avatar", "Avatar")
    return jsonify({"data": user_out_schema.dump(user), "message": "Avatar updated successfully"}), 200


@bp.patch("/cover-image")
@jwt_required()
def update_cover_image():
    """
    Replace the cover image
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: coverImage, type: file, required: true }
    responses:
      200: { description: OK }
      400: { description: Cover image file missing or upload failed }
    """
    user = _replace_image("cover_image", "coverImage", "Cover image")
    return jsonify({"data": user_out_schema.dump(user), "message": "Cover image updated successfully"}), 200
