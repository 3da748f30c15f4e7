# services/wompi.py
"""
Wompi payment gateway helpers.

- Approval fee calculation and minor-unit conversion
- Payment references: LEASE-{lease_id}-{epoch_millis}
- Integrity signature: SHA256(reference + amount_in_cents + currency + integrity_secret)
- Event checksum: SHA256(property values in order + timestamp + events_secret)
- Web checkout URL carrying the signed amount
"""
import hashlib
import hmac
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Tuple
from urllib.parse import urlencode

from config import settings

TRANSACTION_UPDATED = "transaction.updated"


def _sha256(payload: str) -> str:
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def to_cents(amount) -> int:
     """Convert a display amount to provider minor units (x100)."""
     return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_approval_fee(monthly_rent, percentage: Optional[Decimal] = None) -> Decimal:
     """round(rent * percentage / 100), half up, in whole currency units."""
     if percentage is None:
          percentage = settings.approval_fee_percentage
     fee = Decimal(str(monthly_rent)) * Decimal(str(percentage)) / Decimal("100")
     return fee.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def generate_payment_reference(lease_id: str, timestamp_ms: Optional[int] = None) -> str:
     if timestamp_ms is None:
          timestamp_ms = int(time.time() * 1000)
     return f"LEASE-{lease_id}-{timestamp_ms}"


def generate_integrity_signature(reference: str, amount_in_cents: int, currency: str = "COP") -> str:
     return _sha256(f"{reference}{amount_in_cents}{currency}{settings.wompi_integrity_secret}")


def build_checkout_url(reference: str, amount_in_cents: int, currency: str, integrity_signature: str) -> str:
     """Web checkout URL; the provider re-checks the integrity signature against the amount."""
     query = urlencode({
          "public-key": settings.wompi_public_key,
          "currency": currency,
          "amount-in-cents": amount_in_cents,
          "reference": reference,
          "signature:integrity": integrity_signature,
          "redirect-url": f"{settings.app_url}/payments",
     })
     return f"{settings.wompi_checkout_url}?{query}"


def _stringify(value: Any) -> str:
     if value is None:
          return ""
     if isinstance(value, bool):
          return "true" if value else "false"
     return str(value)


def resolve_property(event: dict, path: str) -> str:
     """
     Resolve a dotted property path such as "transaction.status".

     Paths are relative to the event's `data` object (where the provider
     puts the transaction); a path whose first key is not in `data` is
     resolved from the event root. Missing values resolve to "".
     """
     data = event.get("data")
     keys = path.split(".")
     value: Any = data if isinstance(data, dict) and keys[0] in data else event
     for key in keys:
          if not isinstance(value, dict):
               return ""
          value = value.get(key)
     return _stringify(value)


def calculate_event_checksum(values: Iterable[str], timestamp: Any) -> str:
     return _sha256("".join([*values, _stringify(timestamp), settings.wompi_events_secret]))


def validate_event_checksum(values: Iterable[str], timestamp: Any, received_checksum: str) -> Tuple[bool, str]:
     """
     Recompute the event checksum and compare it (case-insensitive, constant time).

     Returns:
          (is_valid, calculated_checksum)
     """
     calculated = calculate_event_checksum(values, timestamp)
     is_valid = hmac.compare_digest(
          calculated.upper().encode("utf-8"),
          str(received_checksum or "").upper().encode("utf-8"),
     )
     return is_valid, calculated
