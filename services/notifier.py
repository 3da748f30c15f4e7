# services/notifier.py
"""
OTP delivery channels.

The OTP signer only knows the `OtpNotifier` interface; which channel is used
is decided by the OTP_NOTIFIER setting (`log` or `email`).
"""
import logging

from config import settings
from utils.email import send_otp_email

logger = logging.getLogger(__name__)


class OtpNotifier:
     """Delivers a freshly minted signature code to its owner."""

     def send(self, email: str, code: str, expiry_minutes: int) -> None:
          raise NotImplementedError


class LogOtpNotifier(OtpNotifier):
     """Development channel: the code only goes to the server log."""

     def send(self, email: str, code: str, expiry_minutes: int) -> None:
          if settings.is_production:
               logger.info("OTP issued for %s (delivery disabled)", email)
          else:
               logger.info("OTP for %s: %s (expires in %s minutes)", email, code, expiry_minutes)


class EmailOtpNotifier(OtpNotifier):
     """Sends the code through the Brevo transactional e-mail API."""

     def send(self, email: str, code: str, expiry_minutes: int) -> None:
          send_otp_email(email, code, expiry_minutes)
          logger.info("OTP e-mail sent to %s", email)


def get_notifier() -> OtpNotifier:
     """FastAPI dependency returning the configured channel."""
     if settings.otp_notifier == "email":
          return EmailOtpNotifier()
     return LogOtpNotifier()
