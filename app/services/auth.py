from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth as firebase_auth
from sqlalchemy.orm import Session

from app.db import get_db
from app.exceptions import UnauthorizedException
from app.models.user import User, UserRole
from app.utils.datetime import utc_now

security = HTTPBearer(auto_error=False)

# Test tokens for development (users are persisted so FK constraints pass)
MOCK_USERS = {
    "mock-employee-token": ("employee-1", "Employee One", "employee@example.com", UserRole.employee),
    "mock-referent-token": ("referent-1", "Referent One", "referent@example.com", UserRole.employee),
    "mock-coach-token": ("coach-1", "Coach One", "coach@example.com", UserRole.coach),
    "mock-admin-token": ("admin-1", "Admin One", "admin@example.com", UserRole.admin),
}


def _role_from_claim(claim) -> UserRole:
    try:
        return UserRole(claim)
    except ValueError:
        return UserRole.employee


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Authorization header missing or invalid")
    token = credentials.credentials

    if token in MOCK_USERS:
        uid, name, email, role = MOCK_USERS[token]
        user = db.query(User).filter(User.id == uid).first()
        if not user:
            user = User(id=uid, full_name=name, email=email, role=role, created_at=utc_now())
            db.add(user)
            db.commit()
            db.refresh(user)
        return user

    try:
        decoded_token = firebase_auth.verify_id_token(token)
        user_id = decoded_token["uid"]
        email = decoded_token["email"]
        full_name = decoded_token.get("name")
        if not full_name:
            given = decoded_token.get("given_name", "")
            family = decoded_token.get("family_name", "")
            full_name = (given + " " + family).strip() or None
        role_from_token = decoded_token.get("role")
    except Exception:
        raise UnauthorizedException("Invalid or expired Firebase token")

    user = db.query(User).filter(User.id == user_id).first()
    if user:
        return user

    # Existing account provisioned by email before the first sign-in
    user = db.query(User).filter(User.email == email).first()
    if user:
        user.id = user_id
        db.commit()
        return user

    user = User(
        id=user_id,
        email=email,
        full_name=full_name or email.split('@')[0].title(),
        role=_role_from_claim(role_from_token),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def is_admin(user: User) -> bool:
    return user.role == UserRole.admin

