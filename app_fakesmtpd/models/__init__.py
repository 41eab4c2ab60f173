from app_fakesmtpd.models.message import Message

__all__ = [
    'Message',
]
