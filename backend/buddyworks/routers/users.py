from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from buddyworks.dependencies import get_user_directory
from buddyworks.errors import MarketplaceError, raise_http_error
from buddyworks.services.user_directory import UserDirectory

router = APIRouter(tags=["users"])


@router.get("/users", response_model=List[Dict[str, Any]])
async def list_users(directory: UserDirectory = Depends(get_user_directory)):
    try:
        return await directory.list_all()
    except MarketplaceError as exc:
        raise_http_error(exc)
