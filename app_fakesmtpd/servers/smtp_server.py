"""
SMTP server implementation

This module implements a fake SMTP server on asyncio streams. Every dialog is
accepted without validation and each completed session is written to the
message store; nothing is ever delivered.
"""
import asyncio
import logging
import re
from typing import List, Optional

from asgiref.sync import sync_to_async

from app_fakesmtpd.consts.fakesmtpd_const import (
    REPLY_GREETING,
    REPLY_EHLO_EXTENSION,
    REPLY_EHLO_HELP,
    REPLY_OK,
    REPLY_START_DATA,
    REPLY_BYE,
    DATA_TERMINATOR,
)
from app_fakesmtpd.enums.session_state_enum import SessionStateEnum
from app_fakesmtpd.models.message import Message
from app_fakesmtpd.services.message_store import MessageStore
from common.utils.date_util import get_now_fixed_width_str

logger = logging.getLogger(__name__)

# EHLO is matched case-sensitively and DATA case-insensitively; existing
# fixtures depend on this exact behavior.
EHLO_PATTERN = re.compile(r'^EHLO\s+')
DATA_PATTERN = re.compile(r'^DATA', re.IGNORECASE)


def chomp(line: str) -> str:
    """Remove one trailing line ending (CRLF, LF or CR)"""
    if line.endswith('\r\n'):
        return line[:-2]
    if line.endswith(('\n', '\r')):
        return line[:-1]
    return line


class SMTPSession:
    """State of one SMTP dialog

    feed() consumes one client line and returns the replies for it. The
    session never touches the connection; SMTPHandler drives the I/O.
    """

    def __init__(self):
        self.state = SessionStateEnum.GREETING
        self.message_id: Optional[str] = None
        self.mail_from: Optional[str] = None
        self.recipients: List[str] = []
        self.body: List[str] = []

    def __str__(self):
        return f"<smtp client {self.message_id}>"

    @property
    def is_done(self) -> bool:
        return self.state is SessionStateEnum.DONE

    @property
    def is_complete(self) -> bool:
        """True once the DATA terminator has been received"""
        return self.state in (SessionStateEnum.QUIT, SessionStateEnum.DONE)

    def greet(self) -> List[str]:
        """Start the dialog, returns the greeting"""
        if self.state is not SessionStateEnum.GREETING:
            raise ValueError(f"Session already greeted, state={self.state.name}")
        self.state = SessionStateEnum.HELO
        return [REPLY_GREETING]

    def feed(self, line: str) -> List[str]:
        """
        Consume one client line

        Args:
            line: Client line without its line ending

        Returns:
            Reply lines to send, possibly none
        """
        if self.state is SessionStateEnum.HELO:
            return self._handle_helo(line)
        if self.state is SessionStateEnum.FROM:
            return self._handle_from(line)
        if self.state is SessionStateEnum.RCPT:
            return self._handle_rcpt(line)
        if self.state is SessionStateEnum.DATA:
            return self._handle_data(line)
        if self.state is SessionStateEnum.QUIT:
            return self._handle_quit(line)
        raise ValueError(f"Session does not accept input, state={self.state.name}")

    def _handle_helo(self, line: str) -> List[str]:
        # the envelope starts here, not at connection open
        self.message_id = get_now_fixed_width_str()
        logger.info(f"{self} Helo: {line!r}")
        self.state = SessionStateEnum.FROM

        if EHLO_PATTERN.match(line):
            logger.info(f"{self} Seen an EHLO")
            return [REPLY_EHLO_EXTENSION, REPLY_EHLO_HELP]
        return []

    def _handle_from(self, line: str) -> List[str]:
        self.mail_from = line
        logger.info(f"{self} From: {line!r}")
        self.state = SessionStateEnum.RCPT
        return [REPLY_OK]

    def _handle_rcpt(self, line: str) -> List[str]:
        if DATA_PATTERN.match(line):
            self.state = SessionStateEnum.DATA
            return [REPLY_START_DATA]

        logger.info(f"{self} To: {line!r}")
        self.recipients.append(line)
        return [REPLY_OK]

    def _handle_data(self, line: str) -> List[str]:
        if line == DATA_TERMINATOR:
            self.state = SessionStateEnum.QUIT
            return [REPLY_OK]

        # dot-stuffed lines are kept as received
        self.body.append(line)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{self} + {line}")
        return []

    def _handle_quit(self, line: str) -> List[str]:
        self.state = SessionStateEnum.DONE
        return [REPLY_BYE]

    def to_message(self) -> Message:
        if not self.is_complete:
            raise ValueError(f"Session not complete, state={self.state.name}")
        return Message(
            message_id=self.message_id,
            mail_from=self.mail_from,
            recipients=list(self.recipients),
            body=list(self.body),
        )


class SMTPHandler:
    """SMTP protocol handler for one connection"""

    def __init__(
            self,
            reader: asyncio.StreamReader,
            writer: asyncio.StreamWriter,
            store: MessageStore
    ):
        self.reader = reader
        self.writer = writer
        self.store = store
        self.session = SMTPSession()
        self.location: Optional[str] = None

    async def handle_client(self):
        """Handle SMTP client connection"""
        try:
            await self.send_responses(self.session.greet())

            while not self.session.is_done:
                line = await self.read_line()
                if line is None:
                    if not self.session.is_complete:
                        logger.info(f"[handle_client] {self.session} Disconnected in state "
                                    f"{self.session.state.name}, message dropped")
                        return
                    # hung up instead of sending QUIT, the message is already stored
                    line = ''

                replies = self.session.feed(line)
                if self.session.is_complete and self.location is None:
                    # stored before the terminator is acknowledged
                    self.location = await self.record()
                await self.send_responses(replies)

            logger.info(f"{self.session} ding!")

        except (ConnectionError, asyncio.IncompleteReadError) as e:
            logger.warning(f"[handle_client] {self.session} Connection lost: {e!r}")
        except Exception as e:
            logger.exception(f"[handle_client] {self.session} Error handling client: {e}")
        finally:
            await self.close()

    async def record(self) -> str:
        """Write the completed message to the store"""
        message = self.session.to_message()
        return await sync_to_async(self.store.put)(
            message.message_id,
            message.mail_from,
            message.recipients,
            message.body,
        )

    async def read_line(self) -> Optional[str]:
        """
        Read one line of any length

        Returns:
            Line without its line ending, None at end of stream
        """
        chunks = []
        while True:
            try:
                chunks.append(await self.reader.readuntil(b'\n'))
                break
            except asyncio.LimitOverrunError as e:
                chunks.append(await self.reader.readexactly(e.consumed))
            except asyncio.IncompleteReadError as e:
                # end of stream, possibly after an unterminated line
                chunks.append(e.partial)
                break

        data = b''.join(chunks)
        if not data:
            return None
        return chomp(data.decode('utf-8', errors='replace'))

    async def send_responses(self, responses: List[str]):
        """Send SMTP replies"""
        if not responses:
            return
        self.writer.write(''.join(f'{response}\r\n' for response in responses).encode('utf-8'))
        await self.writer.drain()

    async def close(self):
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"[close] {self.session} Connection already closed: {e!r}")


class SMTPServer:
    """SMTP server wrapper"""

    def __init__(self, store: MessageStore, host: Optional[str] = None, port: Optional[int] = None):
        if host is None or port is None:
            from app_fakesmtpd.config import get_app_config
            config = get_app_config()
            host = config['host'] if host is None else host
            port = config['smtp_port'] if port is None else port

        self.store = store
        self.host = host
        self.port = port
        self.server: Optional[asyncio.AbstractServer] = None

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle new client connection"""
        handler = SMTPHandler(reader, writer, self.store)
        await handler.handle_client()

    async def start(self):
        """Bind the SMTP server"""
        try:
            self.server = await asyncio.start_server(
                self.handle_client,
                self.host,
                self.port
            )
        except Exception as e:
            logger.exception(f"[SMTPServer] Failed to start SMTP server: {e}")
            raise

        self.port = self.server.sockets[0].getsockname()[1]
        logger.info(f"[SMTPServer] Serving on {self.host}:{self.port}, "
                    f"writing messages to {str(self.store.message_dir)!r}")

    async def serve_forever(self):
        async with self.server:
            await self.server.serve_forever()

    def stop(self):
        """Stop SMTP server"""
        if self.server:
            self.server.close()
            logger.info("[SMTPServer] Stopped SMTP server")
