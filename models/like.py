from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Like(BaseModel, Base):
    __tablename__ = "likes"

    # A like targets a video or a comment
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    liked_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    video = relationship("Video", back_populates="likes")
    liked_by = relationship("User")

    __table_args__ = (
        UniqueConstraint("video_id", "liked_by_id", name="uq_likes_video_user"),
    )
