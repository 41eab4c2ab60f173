"""
Base exception for fakesmtpd
"""

from common.exceptions.base_exception import CheckedException


class FakeSMTPdException(CheckedException):
    """Base exception for fakesmtpd errors"""
    pass
