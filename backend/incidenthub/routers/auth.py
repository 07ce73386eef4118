import logging
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from incidenthub.core.database import get_db
from incidenthub.core.exceptions import AuthenticationError, ForbiddenError, NotFoundError
from incidenthub.core.security import create_access_token, decode_access_token
from incidenthub.models.user import User
from incidenthub.schemas.user import Token, UserProfile, UserRegister
from incidenthub.services.policy import is_admin
from incidenthub.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)

async def get_current_user(token: Annotated[Optional[str], Depends(oauth2_scheme)], db: AsyncSession = Depends(get_db)):
    if not token:
        raise AuthenticationError("Not authenticated")
    credentials_exception = AuthenticationError("Could not validate credentials")
    try:
        payload = decode_access_token(token)
        username: Optional[str] = payload.get("sub")
        if username is None:
            logger.warning("Token missing 'sub' claim")
            raise credentials_exception
    except JWTError as e:
        logger.warning("JWT validation error: %s", e)
        raise credentials_exception

    try:
        user = await UserService(db).load_for_authentication(username)
    except NotFoundError:
        raise credentials_exception
    if not user.enabled:
        raise credentials_exception
    return user

async def require_admin(current_user: User = Depends(get_current_user)):
    if not is_admin(current_user):
        logger.warning("User %s denied access to admin area", current_user.username)
        raise ForbiddenError("You do not have permission to access this resource")
    return current_user

@router.get("/register")
async def show_registration_form():
    return {
        "form": {"username": "", "email": "", "password": "", "confirm_password": ""},
    }

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(user_in: UserRegister, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).register_user(user_in)
    logger.info("New user registered successfully: %s", user.username)
    return {"message": "Registration successful! Please log in.", "redirect": "/login"}

@router.get("/login")
async def show_login_page(error: Optional[str] = None, logout: Optional[str] = None):
    page = {}
    if error is not None:
        page["error"] = "Invalid username or password"
        logger.warning("Failed login attempt")
    if logout is not None:
        page["message"] = "You have been logged out successfully"
        logger.info("User logged out")
    return page

@router.post("/login", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).authenticate(form_data.username, form_data.password)
    access_token = create_access_token(
        data={"sub": user.username, "role": user.role.value, "user_id": user.id}
    )
    logger.info("User %s logged in", user.username)
    return {"access_token": access_token, "token_type": "bearer"}

@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    """Logout endpoint (client-side token removal)"""
    logger.info("User %s logged out", current_user.username)
    return {"message": "You have been logged out successfully", "redirect": "/login?logout"}

@router.get("/me", response_model=UserProfile)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user
