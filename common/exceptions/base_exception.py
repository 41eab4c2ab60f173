class CheckedException(Exception):
    """
    Base of the exceptions a caller is expected to handle
    """

    def __init__(self, message: str = ""):
        self.message = message
        super(CheckedException, self).__init__(message)
