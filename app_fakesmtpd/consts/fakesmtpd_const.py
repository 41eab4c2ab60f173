# SMTP replies
REPLY_GREETING = "220 localhost fakesmtpd ready ESMTP"
REPLY_EHLO_EXTENSION = "250-localhost only has this one extension"
REPLY_EHLO_HELP = "250 HELP"
REPLY_OK = "250 OK"
REPLY_START_DATA = "354 Lemme have it"
REPLY_BYE = "221 Buhbye"

# Line that terminates the DATA phase
DATA_TERMINATOR = "."

# Message record files: <prefix><message_id><suffix>
MESSAGE_FILE_PREFIX = "fakesmtpd-client-"
MESSAGE_FILE_SUFFIX = ".json"
MESSAGE_FILE_GLOB = f"{MESSAGE_FILE_PREFIX}*{MESSAGE_FILE_SUFFIX}"

# Temporary files never match MESSAGE_FILE_GLOB
MESSAGE_TEMP_FILE_PREFIX = ".tmp-"

# Query service port is the SMTP port plus this offset
QUERY_PORT_OFFSET = 1

DEFAULT_HOST = "127.0.0.1"
DEFAULT_SMTP_PORT = 9125
DEFAULT_MESSAGE_DIR = ".artifacts"
DEFAULT_PIDFILE = "fakesmtpd.pid"
DEFAULT_STARTUP_TIMEOUT = 5.0

LOG_FORMAT = "[fakesmtpd] %(levelname)s %(asctime)s %(name)s - %(message)s"

# WSGI environ key carrying the message store to the query API views
MESSAGE_STORE_ENVIRON_KEY = "fakesmtpd.message_store"
