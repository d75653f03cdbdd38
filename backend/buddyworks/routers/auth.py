from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Response

from buddyworks.auth import clear_token_cookie, issue_token_cookie
from buddyworks.models import AuthResult

router = APIRouter(tags=["auth"])


@router.post("/jwt", response_model=AuthResult)
def login(response: Response, payload: Optional[Dict[str, Any]] = Body(default=None)):
    email = (payload or {}).get("email")
    if not isinstance(email, str) or not email.strip():
        raise HTTPException(status_code=400, detail="email is required")
    issue_token_cookie(response, email.strip())
    return AuthResult(success=True)


@router.post("/logout", response_model=AuthResult)
def logout(response: Response):
    clear_token_cookie(response)
    return AuthResult(success=True)
