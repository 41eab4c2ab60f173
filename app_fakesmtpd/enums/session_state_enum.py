from enum import Enum


class SessionStateEnum(Enum):
    """States of one SMTP session, in dialog order"""

    GREETING = 0  # waiting to send the 220 banner
    HELO = 1  # waiting for HELO/EHLO
    FROM = 2  # waiting for MAIL FROM
    RCPT = 3  # collecting RCPT TO until DATA
    DATA = 4  # collecting body lines until "."
    QUIT = 5  # message stored, one more line is read and discarded
    DONE = 6
