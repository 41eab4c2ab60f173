"""
Message query API views

Read and delete operations over the message store for the test harness.
Every response is JSON; unmatched paths are answered by NotFoundView.
"""
import logging

from rest_framework import exceptions
from rest_framework import status as http_status
from rest_framework.views import APIView

from app_fakesmtpd.consts.fakesmtpd_const import MESSAGE_STORE_ENVIRON_KEY
from app_fakesmtpd.services.message_store import MessageStore, get_message_store
from common.utils.http_util import (
    IgnoreClientContentNegotiation,
    PrettyJSONRenderer,
    resp_ok,
    resp_no_content,
    resp_err,
    resp_exception,
)

logger = logging.getLogger(__name__)

MESSAGES_PATH = '/messages'


def get_links(href: str) -> dict:
    return {'self': {'href': href}}


class MessageBaseView(APIView):
    """Store lookup and error payloads shared by the query API views"""

    http_method_names = ['get', 'delete']
    renderer_classes = [PrettyJSONRenderer]
    content_negotiation_class = IgnoreClientContentNegotiation

    def get_store(self) -> MessageStore:
        """Store of the serving QueryServer, else the configured message directory"""
        store = self.request.META.get(MESSAGE_STORE_ENVIRON_KEY)
        if store is None:
            from app_fakesmtpd.config import get_app_config
            store = get_message_store(get_app_config()['message_dir'])
        return store

    def get_raw_method(self) -> str:
        return self.request.META.get('REQUEST_METHOD', self.request.method)

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        # request.method is upper-cased by Django, routing is case-sensitive
        if self.get_raw_method() != request.method:
            raise exceptions.MethodNotAllowed(self.get_raw_method())

    def handle_exception(self, exc):
        path = self.request.get_full_path()
        if isinstance(exc, exceptions.MethodNotAllowed):
            return self.handle_method_not_allowed(path)

        logger.exception(f"[{type(self).__name__}] Error answering {self.get_raw_method()} {path}: {exc}")
        return resp_exception(exc, {'_links': get_links(path)})

    def handle_method_not_allowed(self, path):
        return resp_err(
            f'Method {self.get_raw_method()} not allowed',
            {'_links': get_links(path)},
            status=http_status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        if response.status_code != http_status.HTTP_405_METHOD_NOT_ALLOWED:
            del response['Allow']
        return response


class NotFoundView(MessageBaseView):
    """Answers every method on every unmatched path"""

    http_method_names = []

    def handle_method_not_allowed(self, path):
        return resp_err('Nothing is here', {'_links': get_links(path)})


class RootView(NotFoundView):
    """Self-description listing the messages endpoint"""

    http_method_names = ['get']

    def get(self, request, *args, **kwargs):
        return resp_ok({
            '_links': {
                'self': {'href': request.get_full_path()},
                'messages': {'href': MESSAGES_PATH},
            }
        })


class MessageListView(MessageBaseView):
    """List and clear stored messages"""

    def get(self, request, *args, **kwargs):
        """
        List every stored message

        Each entry links to its detail resource and carries the message id
        and the file it is stored in.
        """
        messages = [
            {
                '_links': get_links(f"{MESSAGES_PATH}/{message_id}"),
                'message_id': message_id,
                'filename': filename,
            }
            for message_id, filename in self.get_store().list()
        ]
        return resp_ok({
            '_links': get_links(request.get_full_path()),
            '_embedded': {'messages': messages},
        })

    def delete(self, request, *args, **kwargs):
        """Clear every stored message"""
        count = self.get_store().clear()
        logger.info(f"[MessageListView.delete] Cleared {count} messages")
        return resp_no_content()


class MessageDetailView(MessageBaseView):
    """Get a stored message"""

    http_method_names = ['get']

    def get(self, request, message_id, *args, **kwargs):
        """
        Get one message merged with its self link and file name

        URL parameter:
        - message_id: digits of the message id
        """
        path = request.get_full_path()
        store = self.get_store()
        filename = store.locate(message_id)
        document = store.read(message_id) if filename else None
        if document is None:
            return resp_err(f'Message "{message_id}" not found', {'_links': get_links(path)})

        document.update({
            '_links': get_links(path),
            'filename': filename,
        })
        return resp_ok(document)
