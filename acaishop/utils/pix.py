# acaishop/utils/pix.py
"""Static PIX "copia e cola" payloads (EMV BR Code) for a store's own PIX key."""
import re
import unicodedata
from urllib.parse import quote

from acaishop.utils.formatting import to_money

_QR_SERVICE = "https://api.qrserver.com/v1/create-qr-code/"


def crc16_ccitt(payload: str) -> str:
    crc = 0xFFFF
    for byte in payload.encode("utf-8"):
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"


def _field(tag: str, value: str) -> str:
    return f"{tag}{len(value):02d}{value}"


def _ascii(text: str, max_len: int) -> str:
    # bank apps reject accents in name/city
    plain = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return plain.upper()[:max_len]


def generate_pix_code(
    pix_key: str,
    merchant_name: str,
    merchant_city: str,
    amount=None,
    txid: str = "***",
    description: str = "",
) -> str:
    if not pix_key or not pix_key.strip():
        raise ValueError("Chave PIX não configurada")

    account = _field("00", "BR.GOV.BCB.PIX") + _field("01", pix_key.strip())
    if description:
        account += _field("02", description[:40])

    parts = [
        _field("00", "01"),
        _field("26", account),
        _field("52", "0000"),
        _field("53", "986"),
    ]
    if amount is not None and to_money(amount) > 0:
        parts.append(_field("54", f"{to_money(amount):.2f}"))
    parts += [
        _field("58", "BR"),
        _field("59", _ascii(merchant_name, 25) or "LOJA"),
        _field("60", _ascii(merchant_city, 15) or "BRASIL"),
        _field("62", _field("05", re.sub(r"[^A-Za-z0-9*]", "", txid)[:25] or "***")),
    ]

    base = "".join(parts) + "6304"
    return base + crc16_ccitt(base)


def qr_code_url(text: str, size: int = 250) -> str:
    return f"{_QR_SERVICE}?size={size}x{size}&data={quote(text, safe='')}"
