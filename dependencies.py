# dependencies.py
"""
Shared FastAPI dependencies: bearer token decoding and the current principal.

Tokens are HS256 JWTs carrying {"id", "email", "roles"}; session and login
mechanics live elsewhere.
"""
from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request
from jose import JWTError, jwt

from config import settings
from services.authorization import Principal
from services.errors import Unauthenticated
from utils.time import utcnow

TOKEN_TTL = timedelta(days=7)


def create_access_token(user_id: str, email: str, roles: list[str], ttl: Optional[timedelta] = None) -> str:
     claims = {
          "id": user_id,
          "email": email,
          "roles": roles,
          "exp": utcnow() + (ttl or TOKEN_TTL),
     }
     return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise Unauthenticated("Missing token")
     token = auth.split(" ", 1)[1]
     try:
          return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
     except JWTError:
          raise Unauthenticated("Invalid token")


def get_current_principal(token: dict = Depends(verify_token)) -> Principal:
     user_id = token.get("id") or token.get("sub")
     if not user_id:
          raise Unauthenticated("Invalid token")
     roles = token.get("roles") or []
     if isinstance(roles, str):
          roles = roles.split(",")
     return Principal.of(str(user_id), roles, token.get("email", ""))
