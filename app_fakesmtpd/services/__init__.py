from app_fakesmtpd.services.message_store import MessageStore, get_message_store

__all__ = [
    'MessageStore',
    'get_message_store',
]
