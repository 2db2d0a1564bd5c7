"""
Green Eye - Email alerts through the EmailJS REST API.
"""
import logging

import requests

from config import EMAILJS_PUBLIC_KEY, EMAILJS_SERVICE_ID, EMAILJS_TEMPLATE_ID, HTTP_TIMEOUT

logger = logging.getLogger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"
ALERT_SENDER_NAME = "Green Eye Cube"


class AlertDeliveryError(Exception):
    """Raised when EmailJS does not accept the alert."""


def send_alert(email: str, subject: str, message: str) -> None:
    """Send an alert email. Raises AlertDeliveryError on any failure."""
    payload = {
        "service_id": EMAILJS_SERVICE_ID,
        "template_id": EMAILJS_TEMPLATE_ID,
        "user_id": EMAILJS_PUBLIC_KEY,
        "template_params": {
            "to_email": email,
            "subject": subject,
            "message": message,
            "from_name": ALERT_SENDER_NAME,
        },
    }
    try:
        response = requests.post(EMAILJS_SEND_URL, json=payload, timeout=HTTP_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"Alert to {email} failed: {e}")
        raise AlertDeliveryError("Failed to send alert email") from e

    if response.status_code != 200:
        logger.error(f"Alert to {email} rejected: HTTP {response.status_code} {response.text[:200]}")
        raise AlertDeliveryError(f"EmailJS API returned status {response.status_code}")

    logger.info(f"Alert sent to {email}")
