from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config_loader import settings
from core.database import get_db
from auth.schemas import CreateOrgPayload, JoinOrgPayload
from auth.utils.auth_utils import decode_access_token, get_password_hash, verify_password
from member.models import Member, MemberRole
from orgrole.models import OrgRole
from organization.models import Organization
from organization import service as org_service

log = structlog.get_logger(__name__)

http_bearer = HTTPBearer(auto_error=False)


def _token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_member_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    db: Session = Depends(get_db),
) -> Optional[Member]:
    token = _token_from_request(request, credentials)
    if not token:
        return None
    claims = decode_access_token(token)
    if not claims or not str(claims.get("sub", "")).isdigit():
        return None
    # reload every time: deleted members and role changes take effect at once
    member = db.get(Member, int(claims["sub"]))
    if member is None or member.org_id != claims.get("org_id"):
        return None
    return member


def get_current_active_user(member: Optional[Member] = Depends(get_current_member_optional)) -> Member:
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return member


def create_org_with_manager(db: Session, p: CreateOrgPayload) -> Member:
    org = Organization(name=p.org_name.strip(), join_code=org_service.new_join_code(db))
    db.add(org)
    db.flush()

    member = Member(
        org_id=org.id,
        name=p.name.strip(),
        email=str(p.email).lower(),
        password_hash=get_password_hash(p.password),
        role=MemberRole.manager,
    )
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="could not create organization, please retry")
    db.refresh(member)
    log.info("organization_created", org_id=org.id, member_id=member.id)
    return member


def join_org(db: Session, p: JoinOrgPayload) -> Member:
    org = org_service.get_organization_by_join_code(db, p.join_code)
    if not org:
        raise HTTPException(status_code=404, detail="Invalid join code")

    email = str(p.email).lower()
    taken = db.scalars(select(Member).where(Member.org_id == org.id, Member.email == email)).first()
    if taken:
        raise HTTPException(status_code=409, detail="This email is already registered in this organization")

    member = Member(
        org_id=org.id,
        name=p.name.strip(),
        email=email,
        password_hash=get_password_hash(p.password),
        role=MemberRole.staff,
        staff_title=p.staff_title.strip(),
    )
    if p.role_ids:
        # silently drop ids that belong to another org
        member.org_roles = list(db.scalars(
            select(OrgRole).where(OrgRole.id.in_(p.role_ids), OrgRole.org_id == org.id)
        ))
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="This email is already registered in this organization")
    db.refresh(member)
    log.info("member_joined", org_id=org.id, member_id=member.id)
    return member


def authenticate(db: Session, email: str, password: str) -> Optional[Member]:
    # the same email may be registered in several organizations
    candidates = db.scalars(
        select(Member).where(Member.email == email.lower()).order_by(Member.id)
    ).all()
    for member in candidates:
        if verify_password(password, member.password_hash):
            return member
    return None
