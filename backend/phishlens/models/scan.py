# backend/phishlens/models/scan.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from phishlens.db import Base


class ScanKind(str, enum.Enum):
    url = "url"
    email = "email"


class ScanEntry(Base):
    __tablename__ = "scans"

    # autoincrement id doubles as insertion order (newest = highest)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    kind = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
