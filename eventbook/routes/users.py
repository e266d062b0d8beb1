from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventbook.core.permissions import Identity
from eventbook.database.db import get_db
from eventbook.routes.deps import get_current_identity
from eventbook.schemas.bookings import MessageOut
from eventbook.schemas.users import UserCreate, UserOut, UserUpdate
from eventbook.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return user_service.register_user(db, payload)


@router.get("/me", response_model=UserOut)
def read_me(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return user_service.get_user(db, identity.id)


@router.get("/{user_id}", response_model=UserOut)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_identity),
):
    return user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return user_service.update_user(db, user_id=user_id, requester_id=identity.id, data=payload)


@router.delete("/{user_id}", response_model=MessageOut)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    user_service.delete_user(db, user_id=user_id, requester_id=identity.id)
    return {"message": "User deleted"}
