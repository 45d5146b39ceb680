"""
Authentication blueprint (mounted at /api/v1/users):
- POST /register
- POST /login
- POST /logout
- POST /refresh-token
- POST /change-password

Session state lives in utils.sessions.SessionManager; this module only maps
requests onto it and puts the issued tokens in cookies + the JSON body.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.user import User
from models.schemas.user import (
    ChangePasswordSchema,
    UserLoginSchema,
    UserOutSchema,
    UserRegisterSchema,
)
from utils import media
from utils.decorators import jwt_required
from utils.exceptions import ConflictError, MediaUploadError, ValidationError
from utils.security import hash_password
from utils.sessions import get_session_manager

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
change_password_schema = ChangePasswordSchema()
user_out_schema = UserOutSchema()

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _cookie_options() -> dict:
    return {"httponly": True, "secure": current_app.config.get("COOKIE_SECURE", True)}


def _set_token_cookies(response, access_token: str, refresh_token: str):
    options = _cookie_options()
    response.set_cookie(ACCESS_COOKIE, access_token, **options)
    response.set_cookie(REFRESH_COOKIE, refresh_token, **options)
    return response


def _request_data() -> dict:
    """JSON body, or form fields for urlencoded/multipart clients."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


@bp.post("/register")
def register():
    """
    Register a new user (multipart form with avatar upload).
    ---
    tags:
      - Auth
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: fullName, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file }
    responses:
      201:
        description: Created
      400:
        description: Missing fields or avatar
      409:
        description: Username or email already registered
    """
    data = user_register_schema.load(request.form.to_dict())

    session = storage.get_session()
    existing = (
        session.query(User)
        .filter(or_(User.username == data["username"], User.email == data["email"]))
        .first()
    )
    if existing:
        raise ConflictError("User with email or username already exists")

    avatar_file = request.files.get("avatar")
    if avatar_file is None or not avatar_file.filename:
        raise ValidationError("Avatar file is required")

    tmp_dir = current_app.config["UPLOAD_TMP_DIR"]
    avatar = media.upload_on_cloudinary(media.stash_upload(avatar_file, tmp_dir))
    if not avatar:
        raise MediaUploadError("Avatar file is required")
    # Only staged once the avatar is safely hosted
    cover_image = media.upload_on_cloudinary(media.stash_upload(request.files.get("coverImage"), tmp_dir))

    user = User(
        full_name=data["full_name"],
        avatar=avatar["url"],
        cover_image=(cover_image or {}).get("url", ""),
        email=data["email"],
        username=data["username"],
        password_hash=hash_password(data["password"]),
    )
    storage.new(user)
    try:
        storage.save()
    except SQLAlchemyError:
        # e.g. a concurrent registration took the username; drop the assets we just hosted
        for uploaded in (avatar, cover_image):
            if uploaded:
                media.delete_from_cloudinary(uploaded.get("public_id"))
        raise

    return jsonify({"data": user_out_schema.dump(user), "message": "User registered successfully"}), 201


@bp.post("/login")
def login():
    """
    Login with username or email; returns the user plus access/refresh tokens
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (sets accessToken/refreshToken cookies)
      400:
        description: Missing username/email or password
      404:
        description: Unknown user or wrong password
    """
    payload = user_login_schema.load(_request_data())
    username = payload.get("username")
    email = payload.get("email")
    password = payload.get("password")
    if not username and not email:
        raise ValidationError("Username or email is required")
    if not password:
        raise ValidationError("Password is required")

    result = get_session_manager().login(password, username=username, email=email)

    response = jsonify(
        {
            "data": {
                "user": user_out_schema.dump(result["user"]),
                "accessToken": result["access_token"],
                "refreshToken": result["refresh_token"],
            },
            "message": "User logged in successfully",
        }
    )
    return _set_token_cookies(response, result["access_token"], result["refresh_token"]), 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: forget the stored refresh token and clear both cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    get_session_manager().logout(g.current_user.id)

    response = jsonify({"data": {}, "message": "User logged out successfully"})
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response, 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange the current refresh token (cookie or body) for a new pair
    ---
    tags:
      - Auth
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Rotated tokens
      401:
        description: Missing, invalid, expired or already used refresh token
    """
    incoming = request.cookies.get(REFRESH_COOKIE) or _request_data().get("refreshToken")
    tokens = get_session_manager().refresh(incoming)

    response = jsonify(
        {
            "data": {"accessToken": tokens["access_token"], "refreshToken": tokens["refresh_token"]},
            "message": "Access token refreshed",
        }
    )
    return _set_token_cookies(response, tokens["access_token"], tokens["refresh_token"]), 200


@bp.post("/change-password")
@jwt_required()
def change_password():
    """
    Change the current user's password
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      400:
        description: Old password incorrect
    """
    data = change_password_schema.load(_request_data())
    get_session_manager().change_password(g.current_user.id, data["old_password"], data["new_password"])
    return jsonify({"data": {}, "message": "Password changed successfully"}), 200
