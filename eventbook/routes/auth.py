from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventbook.core.permissions import Identity, Role
from eventbook.core.security import create_access_token
from eventbook.database.db import get_db
from eventbook.routes.deps import get_current_identity
from eventbook.schemas.auth import SignInRequest, TokenOut, ValidateOut
from eventbook.services.users import authenticate, get_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signin", response_model=TokenOut)
def signin(payload: SignInRequest, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    token = create_access_token(user_id=user.id, role=Role(user.role))
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.get("/validate", response_model=ValidateOut)
@router.get("/check", response_model=ValidateOut)
def validate(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return {"user": get_user(db, identity.id)}
