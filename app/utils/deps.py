from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.core.database import SessionLocal
from app.core.security import decode_access_token
from app.crud.user import user as user_crud
from app.schemas.token import TokenPayload
from app.schemas.user import User, UserContext

# auto_error=False so a missing header yields 401 rather than FastAPI's default 403
http_bearer = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_transactional_db():
    """Session that commits when the endpoint returns and rolls back if it raises."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

def _read_token(credentials: Optional[HTTPAuthorizationCredentials]) -> TokenPayload:
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        return TokenPayload(**decode_access_token(credentials.credentials))
    except JWTError:
        raise _unauthorized("Could not validate credentials")
    except ValidationError:
        raise _unauthorized("Invalid token payload")

def get_current_user_with_context(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> UserContext:
    token_data = _read_token(credentials)

    user = user_crud.get(db, id=token_data.user_id)
    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    # The role claim is what the identity provider granted for this session.
    return UserContext(user=User.model_validate(user), role=token_data.role)
