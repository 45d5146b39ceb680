from marshmallow import EXCLUDE, Schema, fields, pre_load, validates, validates_schema, ValidationError, validate


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _norm_username(v):
    return v.strip().lower() if isinstance(v, str) else v


def _not_blank(value):
    if not value or not value.strip():
        raise ValidationError("Field may not be blank.")


class UserRegisterSchema(Schema):
    """Multipart register form; avatar/coverImage files are handled by the view."""

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, data_key="fullName", validate=[_not_blank, validate.Length(max=255)])
    email = fields.Email(required=True)
    username = fields.String(required=True, validate=[_not_blank, validate.Length(max=64)])
    password = fields.String(required=True, load_only=True, validate=_not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "email" in data:
            data["email"] = _norm_email(data["email"])
        if "username" in data:
            data["username"] = _norm_username(data["username"])
        if isinstance(data.get("fullName"), str):
            data["fullName"] = data["fullName"].strip()
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "email" in data:
            data["email"] = _norm_email(data["email"])
        if "username" in data:
            data["username"] = _norm_username(data["username"])
        return data


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(required=True, data_key="oldPassword", validate=_not_blank)
    new_password = fields.String(required=True, data_key="newPassword", validate=_not_blank)

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")

    @validates_schema
    def validate_distinct(self, data, **kwargs):
        if data.get("old_password") and data.get("old_password") == data.get("new_password"):
            raise ValidationError("New password must differ from the old one.", "newPassword")


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, data_key="fullName", validate=[_not_blank, validate.Length(max=255)])
    email = fields.Email(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class UserOutSchema(Schema):
    # password_hash and refresh_token are never dumped
    id = fields.String()
    username = fields.String()
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class UserOwnerSchema(Schema):
    """Public projection embedded in comments."""
    id = fields.String()
    username = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar = fields.String()
