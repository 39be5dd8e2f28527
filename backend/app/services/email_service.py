import os
import logging
import smtplib
from email.mime.text import MIMEText
from dotenv import load_dotenv

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '../../.env'))

logger = logging.getLogger(__name__)

EMAIL_SENDER = os.getenv("EMAIL_SENDER")
EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD")

SMTP_SERVER = os.getenv("SMTP_SERVER", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))


def send_verification_email(to_email: str, verification_link: str) -> bool:
    if not EMAIL_SENDER or not EMAIL_PASSWORD:
        logger.warning("Email configuration missing - EMAIL_SENDER or EMAIL_PASSWORD not set")
        return False

    subject = "Verify your CompanyHub email address"
    body = f"Welcome to CompanyHub! Click the link to verify your email address: {verification_link}"
    msg = MIMEText(body)
    msg["Subject"] = subject
    msg["From"] = EMAIL_SENDER
    msg["To"] = to_email

    try:
        with smtplib.SMTP(SMTP_SERVER, SMTP_PORT) as server:
            server.starttls()
            server.login(EMAIL_SENDER, EMAIL_PASSWORD)
            server.sendmail(EMAIL_SENDER, [to_email], msg.as_string())
        return True
    except Exception as e:
        logger.warning("Failed to send verification email to %s: %s", to_email, e)
        return False
