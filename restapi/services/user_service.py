import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from restapi.models.user import User
from restapi.services.hasher import Hasher

logger = structlog.get_logger()


class UserAlreadyExists(Exception):
    pass


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def get_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def create_user(db: Session, hasher: Hasher, email: str, username: str, password: str) -> User:
    """
    Insert a new user with a hashed password.

    Raises UserAlreadyExists when the username or email is taken.
    """
    if get_user_by_username(db, username) is not None:
        raise UserAlreadyExists(f"Username {username} is already taken.")
    if get_user_by_email(db, email) is not None:
        raise UserAlreadyExists(f"User with email {email} already exists.")

    user = User(
        username=username,
        email=email,
        password=hasher.hash(password),
    )

    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same username/email
        db.rollback()
        raise UserAlreadyExists(f"User {username} <{email}> already exists.") from e
    db.refresh(user)

    logger.info("user_created", user_id=user.id)
    return user
