from marshmallow import Schema, fields


class VideoOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    description = fields.String()
    thumbnail = fields.String()
    video_file = fields.String(data_key="videoFile")
    duration = fields.Float()
    views = fields.Integer()
    is_published = fields.Boolean(data_key="isPublished")
    owner_id = fields.String(data_key="owner")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class ChannelStatsSchema(Schema):
    total_videos = fields.Integer(data_key="totalVideos")
    total_views = fields.Integer(data_key="totalViews")
    total_likes = fields.Integer(data_key="totalLikes")
    total_subscribers = fields.Integer(data_key="totalSubscribers")
