from pydantic import BaseModel
from datetime import datetime

class CourseOut(BaseModel):
    id: str
    title: str
    description: str | None
    price: float
    duration: str | None
    instructor: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True
