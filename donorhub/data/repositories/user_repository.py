from sqlalchemy import Column, DateTime, Integer, String, func

from donorhub.data.base import Base
from donorhub.domain.models import User


class UserORM(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


def user_to_domain(user_orm: UserORM) -> User:
    return User(
        id=user_orm.id,
        email=user_orm.email,
        name=user_orm.name,
        hashed_password=user_orm.hashed_password,
        created_at=user_orm.created_at,
    )


def get_user_by_email(db, email: str):
    user = db.query(UserORM).filter(UserORM.email == email).first()
    return user_to_domain(user) if user else None


def get_user(db, user_id: int):
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    return user_to_domain(user) if user else None


def create_user(db, email: str, name: str, hashed_password: str) -> User:
    db_user = UserORM(email=email, name=name, hashed_password=hashed_password)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return user_to_domain(db_user)
