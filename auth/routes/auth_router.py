from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from core.config_loader import settings
from core.database import get_db
from auth.schemas import (
    AuthResponse, CreateOrgPayload, JoinOrgPayload, LoginPayload, SessionMember, SessionOrganization,
    SessionResponse,
)
from auth.services import auth_service
from auth.services.auth_service import get_current_member_optional
from auth.utils.auth_utils import create_access_token
from member.models import Member

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_TTL_SECONDS,
        path="/",
    )


def _issue(response: Response, member: Member, *, show_join_code: bool = False) -> AuthResponse:
    token = create_access_token(member)
    _set_session_cookie(response, token)
    return AuthResponse(
        member=SessionMember.model_validate(member),
        organization=SessionOrganization(
            id=member.org.id,
            name=member.org.name,
            join_code=member.org.join_code if show_join_code else None,
        ),
        token=token,
    )


# Manager creates a new organization
@auth_router.post("/create-org", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def create_org(payload: CreateOrgPayload, response: Response, db: Session = Depends(get_db)):
    member = auth_service.create_org_with_manager(db, payload)
    return _issue(response, member, show_join_code=True)

# Staff joins with a join code
@auth_router.post("/join-org", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def join_org(payload: JoinOrgPayload, response: Response, db: Session = Depends(get_db)):
    member = auth_service.join_org(db, payload)
    return _issue(response, member)

@auth_router.post("/login", response_model=AuthResponse)
def login(payload: LoginPayload, response: Response, db: Session = Depends(get_db)):
    member = auth_service.authenticate(db, str(payload.email), payload.password)
    if member is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _issue(response, member, show_join_code=member.is_manager)

@auth_router.get("/session", response_model=SessionResponse)
def session(member: Optional[Member] = Depends(get_current_member_optional)):
    if member is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, member=SessionMember.model_validate(member), org_id=member.org_id)

@auth_router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return {"ok": True}
