# schemas/user.py
from typing import List

from schemas.base import CamelModel


class BecomeLandlordResponse(CamelModel):
     roles: List[str]
     token: str
