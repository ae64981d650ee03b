from datetime import timedelta
from sqlalchemy.orm import Session
from marketplace.config import ACCESS_TOKEN_EXPIRE_MINUTES
from marketplace.schemas.user_schema import UserOut, UserLogin, LoginResponse
from marketplace.security.auth import authenticate_user, create_access_token
from marketplace.logger import get_logger

logger = get_logger(__name__)


class UserService:
    @staticmethod
    def login_user(db: Session, user_login: UserLogin) -> LoginResponse:
        user = authenticate_user(db, user_login.email, user_login.password)

        access_token, _ = create_access_token(
            data={"sub": str(user.id)},
            expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
        )

        logger.info(f"User logged in: {user_login.email}")
        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserOut.model_validate(user),
        )


user_app_service = UserService()
