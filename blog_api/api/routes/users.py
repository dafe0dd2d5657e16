"""
User routes for user profile and management operations.
Every route here sits behind the access-token gate.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from blog_api.api.deps import get_current_admin_user, get_current_user
from blog_api.db.session import get_session
from blog_api.models.user import User
from blog_api.schemas.user import UserResponse, UserUpdate
from blog_api.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """
    Get current user's profile.

    Args:
        current_user: Current authenticated user

    Returns:
        User profile data
    """
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
def update_current_user_profile(
    user_update: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    session: Annotated[Session, Depends(get_session)],
) -> UserResponse:
    """
    Update the current user's name and social links.

    Args:
        user_update: Fields to change
        current_user: Current authenticated user
        session: Database session

    Returns:
        Updated profile
    """
    user = UserService.update_profile(session, current_user, user_update)
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse])
def list_users(
    _admin: Annotated[User, Depends(get_current_admin_user)],
    session: Annotated[Session, Depends(get_session)],
) -> List[UserResponse]:
    """List all users (admin only)."""
    return [UserResponse.model_validate(user) for user in UserService.list_users(session)]
