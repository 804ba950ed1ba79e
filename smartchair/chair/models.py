from sqlalchemy import JSON, Column, DateTime, Integer, String

from .db import Base
from .domain import utcnow


class PostureRecord(Base):
    __tablename__ = "posture_data"

    id = Column(Integer, primary_key=True, index=True)
    source_id = Column(String, nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False, index=True)  # capture time
    stored_at = Column(DateTime, nullable=False, default=utcnow)
    sensors = Column(JSON, nullable=True)  # [{"value": n}, ...]
    pose_data = Column(JSON, nullable=True)  # {"keypoints": [...]}
    posture_status = Column(String, nullable=False)
