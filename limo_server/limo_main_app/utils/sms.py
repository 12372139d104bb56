"""Twilio SMS utility"""
from django.conf import settings
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client


def send_sms(phone_number, body):
    """Send an SMS via Twilio, returning a status dict instead of raising"""
    account_sid = settings.TWILIO_ACCOUNT_SID
    auth_token = settings.TWILIO_AUTH_TOKEN
    from_number = settings.TWILIO_PHONE_NUMBER

    if not all([account_sid, auth_token, from_number]):
        return {"status": "error", "message": "Twilio credentials not configured"}
    if not phone_number:
        return {"status": "error", "message": "No phone number"}

    if not phone_number.startswith('+'):
        phone_number = '+' + phone_number

    try:
        client = Client(account_sid, auth_token)
        message = client.messages.create(body=body, from_=from_number, to=phone_number)
    except TwilioRestException as e:
        return {"status": "error", "message": str(e)}

    return {"status": "success", "sid": message.sid}
