from sqlalchemy import Column, String, Float, DateTime, Text
from database import Base
from datetime import datetime

class Course(Base):
    __tablename__ = "courses"

    id = Column(String(100), primary_key=True)  # slug, e.g. "practical-ibarat"
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    duration = Column(String, nullable=True)
    instructor = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
