"""
Message store

Persists every completed SMTP session as one JSON document in the message
directory and answers the queries of the HTTP query service.

Records are named fakesmtpd-client-<message_id>.json, so a single record is
located in O(1) while listing rescans the directory on every call (O(n) in the
number of stored messages).
"""
import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app_fakesmtpd.consts.fakesmtpd_const import (
    MESSAGE_FILE_PREFIX,
    MESSAGE_FILE_SUFFIX,
    MESSAGE_FILE_GLOB,
    MESSAGE_TEMP_FILE_PREFIX,
)
from app_fakesmtpd.exceptions.message_store_exception import MessageStoreException
from app_fakesmtpd.models.message import Message

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r'[^0-9]+')


class MessageStore:
    """File backed message store

    put and clear are serialized by one lock per store. Reads go to the
    filesystem directly and take no lock: a record only becomes visible
    through an atomic rename, so readers never see a partial document.
    """

    def __init__(self, message_dir: str):
        self.message_dir = Path(message_dir).resolve()
        self.lock = threading.Lock()

    def _get_message_path(self, message_id: str) -> Path:
        """Get full path for a message record"""
        return self.message_dir / f"{MESSAGE_FILE_PREFIX}{message_id}{MESSAGE_FILE_SUFFIX}"

    def _message_files(self) -> List[Path]:
        return list(self.message_dir.glob(MESSAGE_FILE_GLOB))

    @staticmethod
    def message_id_of(message_file: Path) -> str:
        """
        Recover the message id from a record file name
        fakesmtpd-client-20240501000000123456789.json -> "20240501000000123456789"
        """
        return _NON_DIGITS.sub('', message_file.name[:-len(MESSAGE_FILE_SUFFIX)])

    def put(
            self,
            message_id: str,
            mail_from: str,
            recipients: Sequence[str],
            body: Sequence[str]
    ) -> str:
        """
        Persist a message

        Args:
            message_id: Message id assigned by the SMTP session
            mail_from: Raw envelope sender line
            recipients: Raw envelope recipient lines
            body: Raw header and body lines

        Returns:
            Absolute path of the written record

        Raises:
            MessageStoreException: If the record could not be written
        """
        message = Message(
            message_id=message_id,
            mail_from=mail_from,
            recipients=list(recipients),
            body=list(body),
        )
        message_path = self._get_message_path(message_id)
        document = json.dumps(message.to_dict(), indent=2, ensure_ascii=False)

        with self.lock:
            temp_path = None
            try:
                fd, temp_path = tempfile.mkstemp(
                    prefix=MESSAGE_TEMP_FILE_PREFIX,
                    suffix=MESSAGE_FILE_SUFFIX,
                    dir=self.message_dir,
                )
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(document)
                    f.write('\n')
                # same message id twice: last write wins
                os.replace(temp_path, message_path)
            except OSError as e:
                if temp_path and os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise MessageStoreException(
                    f"Failed to store message {message_id}: {e}"
                ) from e

        logger.info(f"[put] Stored message {message_id} at {message_path}")
        return str(message_path)

    def list(self) -> List[Tuple[str, str]]:
        """
        Enumerate stored messages by scanning the message directory

        Returns:
            (message_id, absolute path) pairs in directory order
        """
        return [
            (self.message_id_of(message_file), str(message_file))
            for message_file in self._message_files()
        ]

    def locate(self, message_id: str) -> Optional[str]:
        """Get the record path of a message, None if it is not stored"""
        message_path = self._get_message_path(message_id)
        if message_path.is_file():
            return str(message_path)
        return None

    def read(self, message_id: str) -> Optional[Dict[str, Any]]:
        """
        Read the stored document of a message

        Returns:
            The decoded JSON document, None if the message is not stored
        """
        message_path = self._get_message_path(message_id)
        try:
            with open(message_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return None

    def get(self, message_id: str) -> Optional[Message]:
        """Get a stored message, None if it is not stored"""
        document = self.read(message_id)
        if document is None:
            return None
        return Message.from_dict(document)

    def clear(self) -> int:
        """
        Delete every stored message

        Returns:
            Number of deleted records
        """
        deleted = 0
        with self.lock:
            for message_file in self._message_files():
                try:
                    message_file.unlink()
                    deleted += 1
                except FileNotFoundError:
                    pass

        logger.info(f"[clear] Deleted {deleted} messages from {self.message_dir}")
        return deleted


_stores: Dict[Path, MessageStore] = {}
_stores_lock = threading.Lock()


def get_message_store(message_dir: str) -> MessageStore:
    """Get the store of a message directory, one instance per resolved path"""
    key = Path(message_dir).resolve()
    with _stores_lock:
        if key not in _stores:
            _stores[key] = MessageStore(str(key))
        return _stores[key]
