"""
HTTP query server implementation

Serves the query API (app_fakesmtpd.urls) with Django's threaded WSGI server
on a background thread, one thread per connection. Each request carries the
server's message store in its WSGI environ.
"""
import logging
import threading
from typing import Optional

from django.core.servers.basehttp import (
    ThreadedWSGIServer,
    WSGIRequestHandler,
    get_internal_wsgi_application,
)

from app_fakesmtpd.consts.fakesmtpd_const import MESSAGE_STORE_ENVIRON_KEY
from app_fakesmtpd.services.message_store import MessageStore

logger = logging.getLogger(__name__)


class QueryRequestHandler(WSGIRequestHandler):
    """HTTP handler for one connection"""

    def get_environ(self):
        environ = super().get_environ()
        environ[MESSAGE_STORE_ENVIRON_KEY] = self.server.store
        return environ


class QueryWSGIServer(ThreadedWSGIServer):
    """Threaded WSGI server bound to one message store"""

    def __init__(self, server_address, store: MessageStore, **kwargs):
        super().__init__(server_address, QueryRequestHandler, **kwargs)
        self.store = store


class QueryServer:
    """HTTP query server wrapper"""

    def __init__(self, store: MessageStore, host: Optional[str] = None, port: Optional[int] = None):
        if host is None or port is None:
            from app_fakesmtpd.config import get_app_config
            config = get_app_config()
            host = config['host'] if host is None else host
            port = config['query_port'] if port is None else port

        self.store = store
        self.host = host
        self.port = port
        self.httpd: Optional[QueryWSGIServer] = None
        self.thread: Optional[threading.Thread] = None

    def start(self):
        """Bind the HTTP query server and serve it on a background thread"""
        try:
            self.httpd = QueryWSGIServer((self.host, self.port), self.store, ipv6=':' in self.host)
        except Exception as e:
            logger.exception(f"[QueryServer] Failed to start HTTP server: {e}")
            raise

        self.httpd.set_app(get_internal_wsgi_application())
        self.port = self.httpd.server_address[1]
        self.thread = threading.Thread(
            target=self.httpd.serve_forever,
            name=f"fakesmtpd-query-{self.port}",
            daemon=True,
        )
        self.thread.start()
        logger.info(f"[QueryServer] Serving on {self.host}:{self.port}")

    def stop(self):
        """Stop HTTP query server"""
        if self.httpd is None:
            return

        self.httpd.shutdown()
        self.httpd.server_close()
        self.thread.join()
        self.httpd = None
        self.thread = None
        logger.info("[QueryServer] Stopped HTTP server")
