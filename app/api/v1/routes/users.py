"""
User Routes
"""

from fastapi import APIRouter, Depends

from healthmonitor.auth import TokenIdentity
from healthmonitor.database import DataStore
from healthmonitor.errors import NotFound

from app.core.security import require_self_or_admin
from app.models.schemas import UserResponse
from app.services.database import get_store

router = APIRouter()


@router.get("/{user_id}", response_model=UserResponse, response_model_by_alias=True)
def get_user(
    user_id: str,
    current_user: TokenIdentity = Depends(require_self_or_admin),
    store: DataStore = Depends(get_store),
):
    user = store.get_user_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return UserResponse.model_validate(user)
