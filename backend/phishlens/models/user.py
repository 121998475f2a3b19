# backend/phishlens/models/user.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from phishlens.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
