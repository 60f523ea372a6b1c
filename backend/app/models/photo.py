from sqlalchemy import REAL, Boolean, Column, DateTime, Index, Integer, Text, false, text
from sqlalchemy.sql import func

from app.core.database import Base


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Text, primary_key=True)
    title = Column(Text, nullable=True)
    caption = Column(Text, nullable=True)
    taken_at = Column(DateTime(timezone=True), nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    aspect_ratio = Column(REAL, nullable=True)
    blur_data = Column(Text, nullable=True)
    make = Column(Text, nullable=True)
    model = Column(Text, nullable=True)
    focal_length = Column(Text, nullable=True)
    focal_length_in_35mm = Column(Text, nullable=True)
    f_number = Column(REAL, nullable=True)
    iso = Column(Integer, nullable=True)
    exposure_time = Column(Text, nullable=True)
    latitude = Column(REAL, nullable=True)
    longitude = Column(REAL, nullable=True)
    film_simulation = Column(Text, nullable=True)
    hidden = Column(Boolean, server_default=false(), nullable=True)
    priority = Column(Integer, server_default=text("0"), nullable=True)
    image_path = Column(Text, nullable=False)
    thumbnail_path = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    __table_args__ = (
        Index("idx_photos_taken_at", "taken_at"),
        Index("idx_photos_make", "make"),
        Index("idx_photos_hidden", "hidden"),
    )
