from pydantic import BaseModel

from eventbook.schemas.users import UserOut


class SignInRequest(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ValidateOut(BaseModel):
    user: UserOut
