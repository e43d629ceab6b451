from typing import Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate

class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def get_by_enrollment_number(self, db: Session, *, enrollment_number: str) -> Optional[User]:
        return db.query(User).filter(User.enrollment_number == enrollment_number).first()

user = CRUDUser(User)
