"""Outreach tools: phone normalization, SMS and outbound calls over Twilio."""
from .phone import normalize_phone_number, require_phone_number, phone_region
from .twilio_client import TwilioClient, SMSResult, get_twilio_client, reset_twilio_client
from .sms_gateway import SmsGateway, get_sms_gateway

__all__ = [
    "normalize_phone_number",
    "require_phone_number",
    "phone_region",
    "TwilioClient",
    "SMSResult",
    "get_twilio_client",
    "reset_twilio_client",
    "SmsGateway",
    "get_sms_gateway",
]
