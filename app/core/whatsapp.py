# app/core/whatsapp.py
"""
WhatsApp order hand-off helpers.

The vendor is notified through a `https://wa.me/<number>?text=<message>`
link that the storefront opens in a new tab. Nothing here talks to the
network; the link is the whole channel.
"""

import re
from datetime import datetime
from typing import Iterable
from urllib.parse import quote

WA_BASE_URL = "https://wa.me"
DEFAULT_COUNTRY_CODE = "62"

RULE = "─" * 25

MONTHS_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_price(amount: float) -> str:
    """
    Rupiah formatting without decimals: 15000 -> "Rp 15.000".
    """
    value = int(round(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}Rp {abs(value):,}".replace(",", ".")


def format_timestamp(moment: datetime) -> str:
    """Indonesian long date with time, e.g. "5 Maret 2026 pukul 14.07"."""
    return (
        f"{moment.day} {MONTHS_ID[moment.month - 1]} {moment.year} "
        f"pukul {moment.hour:02d}.{moment.minute:02d}"
    )


def normalize_whatsapp_number(number: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Normalize a phone number to international format without '+'.

      "0812-3456-789"  -> "628123456789"
      "8123456789"     -> "628123456789"
      "+62 812345678"  -> "62812345678"
    """
    clean = re.sub(r"\D", "", number)
    if clean.startswith("0"):
        clean = country_code + clean[1:]
    if not clean.startswith(country_code):
        clean = country_code + clean
    return clean


def build_order_message(
    site_name: str,
    customer_name: str,
    lines: Iterable[tuple[str, float, int]],
    total_price: float,
    ordered_at: datetime,
    note: str | None = None,
) -> str:
    """
    Plain-text order summary using WhatsApp markdown (*bold*).

    `lines` holds (product name, unit price, quantity) tuples.
    """
    parts = [
        f"*Pesanan Baru dari {site_name}*",
        "",
        f"*Nama:* {customer_name}",
        f"*Tanggal:* {format_timestamp(ordered_at)}",
        "",
        "*Daftar Pesanan:*",
        RULE,
    ]

    for index, (name, price, quantity) in enumerate(lines, start=1):
        parts.append(f"{index}. {name}")
        parts.append(f"   {quantity}x {format_price(price)} = {format_price(price * quantity)}")

    parts.append(RULE)
    parts.append(f"*Total: {format_price(total_price)}*")

    if note:
        parts.append("")
        parts.append(f"*Catatan:* {note}")

    parts.append("")
    parts.append("Terima kasih!")
    return "\n".join(parts)


def build_whatsapp_url(number: str, message: str) -> str:
    """`number` must already be normalized."""
    return f"{WA_BASE_URL}/{number}?text={quote(message, safe='')}"


class WhatsAppLinkNotifier:
    """
    Order notifier for the checkout flow.

    `send()` returns the wa.me link addressed to the vendor; the storefront
    opening that link is the actual delivery, so there is no guarantee the
    vendor ever receives the message.
    """

    def __init__(self, country_code: str = DEFAULT_COUNTRY_CODE):
        self.country_code = country_code

    def send(self, number: str, message: str) -> str:
        return build_whatsapp_url(normalize_whatsapp_number(number, self.country_code), message)
