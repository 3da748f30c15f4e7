# routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_session
from dependencies import create_access_token, get_current_principal
from models import User
from models.user import ROLE_LANDLORD
from schemas.user import BecomeLandlordResponse
from services.authorization import Principal
from services.errors import NotFound

router = APIRouter(prefix="/api/user", tags=["users"])


@router.post("/become-landlord", response_model=BecomeLandlordResponse)
def become_landlord(
     db: Session = Depends(get_session),
     principal: Principal = Depends(get_current_principal),
):
     """Add the landlord role to the caller and return a token carrying it."""
     user = db.get(User, principal.id)
     if user is None:
          raise NotFound("User not found")

     user.add_role(ROLE_LANDLORD)
     db.commit()
     return BecomeLandlordResponse(
          roles=user.role_list,
          token=create_access_token(user.id, user.email, user.role_list),
     )
