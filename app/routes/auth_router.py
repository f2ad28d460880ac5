from fastapi import APIRouter, HTTPException, Query, Depends, Body
from pydantic import EmailStr
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.utils import create_access_token, create_magic_token, send_email_link
from app.core.config import settings
from app.db.session import get_db
from app.crud import user as crud_user
from app.schemas.user import Token, UserCreate

SECRET_KEY = settings.SECRET_KEY
ALGORITHM  = settings.ALGORITHM

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/request-token")
async def request_token(email: EmailStr = Body(..., embed=True)):
    """Creates a magic link token and e-mails it to the user.

    The token is only delivered by e-mail, never in the response.
    """
    token = create_magic_token(email)
    send_email_link(email, token)
    return {"msg": f"If {email} can sign in, a magic link has been sent"}


@router.get("/verify-token", response_model=Token)
async def verify_token(
    token: str = Query(...),
    db:    Session = Depends(get_db),
):
    """Exchanges a magic link token for an access token.

    If the user is logging in for the first time, their account is
    automatically created; addresses listed in ADMIN_EMAILS become admins.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    email = payload.get("sub")
    if not email or payload.get("scope") != "magic":
        raise HTTPException(status_code=400, detail="Invalid token payload")

    user = crud_user.get_user_by_email(db, email)
    if user is None:
        user_in = UserCreate(
            username=crud_user.available_username(db, email),
            email=email,
            is_admin=email.lower() in settings.admin_emails,
        )
        user = crud_user.create_user(db, user_in)

    return Token(access_token=create_access_token(user.email))
