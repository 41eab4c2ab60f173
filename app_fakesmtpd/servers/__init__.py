from app_fakesmtpd.servers.smtp_server import SMTPServer, SMTPHandler, SMTPSession
from app_fakesmtpd.servers.query_server import QueryServer, QueryRequestHandler

__all__ = [
    'SMTPServer',
    'SMTPHandler',
    'SMTPSession',
    'QueryServer',
    'QueryRequestHandler',
]
