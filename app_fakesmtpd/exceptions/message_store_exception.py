from app_fakesmtpd.exceptions.fakesmtpd_exception import FakeSMTPdException


class MessageStoreException(FakeSMTPdException):
    """Message record could not be persisted or read"""

    def __init__(self, message="Message store error"):
        self.message = message
        super().__init__(self.message)
