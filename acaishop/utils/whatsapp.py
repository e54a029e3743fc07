# acaishop/utils/whatsapp.py
"""Click-to-chat links the admin opens to confirm an order with the customer."""
import re
from datetime import datetime, timezone
from urllib.parse import quote
from zoneinfo import ZoneInfo

from acaishop.utils.settings import STORE_TIMEZONE

_SEND_URL = "https://api.whatsapp.com/send"
BRAZIL_CODE = "55"
_UNRESERVED = "!~*'()"


def format_phone_number(phone: str) -> str:
    """Digits only, with the Brazil country code in front."""
    digits = re.sub(r"\D", "", phone or "")
    if digits.startswith(BRAZIL_CODE) and len(digits) >= 12:
        return digits
    return f"{BRAZIL_CODE}{digits}"


def order_confirmation_message(customer_name: str | None, placed_at: datetime, tz: str = STORE_TIMEZONE) -> str:
    if placed_at.tzinfo is None:
        placed_at = placed_at.replace(tzinfo=timezone.utc)
    when = placed_at.astimezone(ZoneInfo(tz)).strftime("%d/%m/%Y, %H:%M")
    name = customer_name.upper() if customer_name else "CLIENTE"
    return (
        f"Olá, {name}! 😊\n\n"
        f"Recebemos seu pedido realizado em {when}.\n\n"
        "Seu pedido está sendo preparado com todo carinho! Agradecemos a preferência. 💜\n\n"
        "Em caso de dúvidas, entre em contato conosco."
    )


def whatsapp_url(phone: str, message: str) -> str:
    text = quote(message, safe=_UNRESERVED)
    return f"{_SEND_URL}?phone={format_phone_number(phone)}&text={text}"
