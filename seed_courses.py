"""Load the course catalog.

Usage: python seed_courses.py [courses.json]

The JSON file holds a list of objects with id, title, description, price,
duration and instructor. Existing courses are updated in place.
"""
import json
import sys
from database import SessionLocal, Base, engine
from models.course import Course

DEFAULT_COURSES = [
    {
        "id": "practical-ibarat",
        "title": "Practical Ibarat",
        "description": "Reading and translating classical Arabic texts step by step.",
        "price": 500,
        "duration": "3 months",
        "instructor": "Talimul Islam Academy",
    },
]


def seed_courses(session, courses):
    created = 0
    for data in courses:
        course = session.get(Course, data["id"])
        if course is None:
            course = Course(id=data["id"])
            session.add(course)
            created += 1
        for field in ("title", "description", "price", "duration", "instructor"):
            if field in data:
                setattr(course, field, data[field])
    session.commit()
    return created


def main(argv):
    courses = DEFAULT_COURSES
    if len(argv) > 1:
        with open(argv[1], encoding="utf-8") as f:
            courses = json.load(f)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        created = seed_courses(session, courses)
        print(f"Seeded {len(courses)} courses ({created} new)")
    finally:
        session.close()


if __name__ == "__main__":
    main(sys.argv)
