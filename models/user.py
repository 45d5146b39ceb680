from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(64), nullable=False, unique=True, index=True)  # stored lowercased
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(512), nullable=False)
    cover_image = Column(String(512), nullable=True, default="")
    password_hash = Column(String(255), nullable=False)
    # The only refresh token accepted for this user; NULL when logged out
    refresh_token = Column(Text, nullable=True)

    videos = relationship("Video", back_populates="owner", passive_deletes=True)
