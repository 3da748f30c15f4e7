# scripts/seed.py
"""
Seed a development database with a landlord, a tenant and one listing.

Usage:
     python -m scripts.seed

Prints a bearer token for each user so the rental flow can be driven by hand.
"""
import logging
from decimal import Decimal

from passlib.context import CryptContext

from database import get_session_context, init_db
from dependencies import create_access_token
from models import Property, User
from models.user import ROLE_ADMIN, ROLE_LANDLORD, ROLE_TENANT

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEMO_PASSWORD = "rentflow123"

DEMO_USERS = [
     {"email": "landlord@rentflow.test", "name": "Laura Landlord", "roles": [ROLE_TENANT, ROLE_LANDLORD]},
     {"email": "tenant@rentflow.test", "name": "Tomas Tenant", "roles": [ROLE_TENANT]},
     {"email": "admin@rentflow.test", "name": "Ada Admin", "roles": [ROLE_ADMIN]},
]


def _get_or_create_user(db, email: str, name: str, roles: list[str]) -> User:
     user = db.query(User).filter(User.email == email).first()
     if user is None:
          user = User(
               email=email,
               name=name,
               password_hash=pwd_context.hash(DEMO_PASSWORD),
               roles=",".join(roles),
          )
          db.add(user)
          db.flush()
          logger.info("Created user %s", email)
     return user


def seed() -> dict:
     init_db()
     tokens = {}
     with get_session_context() as db:
          users = {u["email"]: _get_or_create_user(db, **u) for u in DEMO_USERS}
          landlord = users["landlord@rentflow.test"]

          listing = db.query(Property).filter(Property.owner_id == landlord.id).first()
          if listing is None:
               listing = Property(
                    owner_id=landlord.id,
                    title="Apartamento en Chapinero",
                    description="Two bedroom apartment close to public transport",
                    property_type="apartment",
                    price=Decimal("1500000"),
                    currency="COP",
                    address="Calle 60 # 9-20",
                    city="Bogota",
                    neighborhood="Chapinero",
                    bedrooms=2,
                    bathrooms=1,
               )
               db.add(listing)
               db.flush()
               logger.info("Created property %s", listing.id)

          for email, user in users.items():
               tokens[email] = create_access_token(user.id, user.email, user.role_list)
          tokens["property_id"] = listing.id
     return tokens


if __name__ == "__main__":
     logging.basicConfig(level=logging.INFO)
     result = seed()
     print(f"Property: {result.pop('property_id')}")
     for email, token in result.items():
          print(f"{email}: {token}")
