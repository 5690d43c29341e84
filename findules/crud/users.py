from sqlalchemy.orm import Session
from findules.models import User


def get_user(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    """Looks a user up by email, case-insensitively. Inactive users included."""
    return db.query(User).filter(User.email == email.strip().lower()).first()
