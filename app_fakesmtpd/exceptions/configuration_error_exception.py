from app_fakesmtpd.exceptions.fakesmtpd_exception import FakeSMTPdException


class ConfigurationErrorException(FakeSMTPdException):
    """Configuration error exception"""

    def __init__(self, message="Configuration error"):
        self.message = message
        super().__init__(self.message)
