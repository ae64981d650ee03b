from fastapi import HTTPException, status
from typing import Optional
from marketplace.schemas.user_schema import UserCreate
from marketplace.models.user_model import User
from sqlalchemy.orm import Session
from marketplace.security.auth import get_password_hash
from marketplace.logger import get_logger

logger = get_logger(__name__)


class UserCRUD:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def create_user(db: Session, user: UserCreate) -> User:
        existing_user = UserCRUD.get_user_by_email(db, user.email)
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User with the email already exist"
            )

        db_user = User(
            full_name=user.full_name,
            email=user.email,
            password_hash=get_password_hash(user.password),
            is_active=True
        )
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
        logger.info(f"Profile created: {db_user.id}")
        return db_user


user_crud = UserCRUD()
