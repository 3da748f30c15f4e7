# utils/email.py
import requests

from config import settings

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def send_otp_email(to_email: str, otp: str, expiry_minutes: int):
     if not settings.brevo_api_key:
          raise Exception("BREVO_API_KEY is not set")

     response = requests.post(
          BREVO_URL,
          headers={
               "api-key": settings.brevo_api_key,
               "Content-Type": "application/json",
          },
          json={
               "sender": {"name": settings.app_name, "email": settings.brevo_sender_email},
               "to": [{"email": to_email}],
               "subject": "Your lease signature code",
               "htmlContent": f"""
                    <h2>Your signature code</h2>
                    <h1 style="color:#F28D35">{otp}</h1>
                    <p>Enter this code to sign your lease. It expires in {expiry_minutes} minutes.</p>
               """,
          },
          timeout=10,
     )
     if response.status_code not in (200, 201):
          raise Exception(f"Brevo error: {response.text}")
