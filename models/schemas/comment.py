from marshmallow import Schema, fields

from models.schemas.user import UserOwnerSchema


class CommentOutSchema(Schema):
    id = fields.String()
    content = fields.String()
    video_id = fields.String(data_key="video")
    owner = fields.Nested(UserOwnerSchema)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
