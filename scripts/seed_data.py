"""Seed the database with workflow users and print bearer tokens for them."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from manuscript_workflow.database import SessionLocal, engine, Base
import manuscript_workflow.models  # noqa: F401

from manuscript_workflow.models.user import User
from manuscript_workflow.services.auth_service import create_access_token


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(email="admin@journal.example", name="Managing Admin", role="admin"),
            User(email="editor1@journal.example", name="Copy Editor One", role="editor"),
            User(email="editor2@journal.example", name="Copy Editor Two", role="editor"),
            User(email="reviewer1@journal.example", name="Peer Reviewer", role="reviewer"),
            User(email="author1@journal.example", name="Submitting Author", role="author"),
        ]
        db.add_all(users)
        db.commit()

        for user in users:
            db.refresh(user)
            print(f"{user.role:<9} {user.email:<28} {create_access_token(user.user_id)}")
        print("Seed data created successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
