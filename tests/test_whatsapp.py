# tests/test_whatsapp.py
import unittest
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

from acaishop.utils.whatsapp import format_phone_number, order_confirmation_message, whatsapp_url


class WhatsAppLinkTests(unittest.TestCase):
    def test_phone_gets_country_code_once(self):
        self.assertEqual(format_phone_number("(11) 99999-0000"), "5511999990000")
        self.assertEqual(format_phone_number("+55 11 99999-0000"), "5511999990000")
        # short numbers starting with 55 are a DDD, not the country code
        self.assertEqual(format_phone_number("55 9999-0000"), "555599990000")

    def test_message_uses_store_local_time(self):
        message = order_confirmation_message(
            "maria", datetime(2025, 3, 2, 1, 30, tzinfo=timezone.utc), tz="America/Sao_Paulo"
        )
        self.assertTrue(message.startswith("Olá, MARIA! 😊"))
        self.assertIn("realizado em 01/03/2025, 22:30.", message)

    def test_message_without_name(self):
        message = order_confirmation_message("", datetime(2025, 3, 1, 12, 0), tz="UTC")
        self.assertTrue(message.startswith("Olá, CLIENTE!"))
        self.assertIn("01/03/2025, 12:00", message)

    def test_url_encodes_the_whole_message(self):
        url = whatsapp_url("11 99999-0000", "Olá & até já!\nok")
        self.assertTrue(url.startswith("https://api.whatsapp.com/send?phone=5511999990000&text="))
        self.assertIn("%26", url)
        self.assertIn("%0A", url)
        self.assertEqual(parse_qs(urlparse(url).query)["text"], ["Olá & até já!\nok"])
