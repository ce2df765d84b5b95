import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import atomic, get_db
from ..exceptions import ConflictError, StorageFailure, UnauthenticatedError
from ..models import User
from ..schemas import AuthResponse, LoginRequest, SignupRequest, UserProfileResponse, UserResponse
from ..security_utils import create_jwt_token, hash_password_bcrypt, verify_password_bcrypt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(user: User) -> str:
    return create_jwt_token({"sub": str(user.id), "email": user.email})


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, db: Session = Depends(get_db)):
    """Create an account and return a bearer token"""
    if db.query(User).filter(User.email == data.email).first():
        logger.warning(f"⚠️ Signup attempted with registered email: {data.email}")
        raise ConflictError("This email is already registered. Please log in instead.")

    user = User(name=data.name, email=data.email, hashed_password=hash_password_bcrypt(data.password))
    try:
        with atomic(db):
            db.add(user)
    except StorageFailure as e:
        # Handle race condition where email was taken between check and insert
        if isinstance(e.__cause__, IntegrityError):
            raise ConflictError("This email is already registered. Please log in instead.") from e
        raise

    db.refresh(user)
    logger.info(f"🆕 New user created: {user.email}")
    return AuthResponse(
        message="Account created successfully",
        token=_issue_token(user),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token"""
    user = db.query(User).filter(User.email == data.email).first()
    if not user or not verify_password_bcrypt(data.password, user.hashed_password):
        logger.warning(f"⚠️ Failed login for {data.email}")
        raise UnauthenticatedError("Invalid email or password")

    logger.info(f"🔑 User {user.id} logged in")
    return AuthResponse(
        message="Login successful",
        token=_issue_token(user),
        user=UserResponse.model_validate(user),
    )


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return {"message": "User retrieved successfully", "user": UserProfileResponse.from_model(current_user)}
