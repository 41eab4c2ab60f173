"""
Django management command to start fakesmtpd (SMTP server and HTTP query API)

Usage:
    python manage.py start_fakesmtpd <smtp-port> <message-dir> [options]
"""
import asyncio
import logging
import os
import signal
from pathlib import Path

from django.core.management.base import BaseCommand

from app_fakesmtpd import VERSION
from app_fakesmtpd.config import get_app_config, get_query_port
from app_fakesmtpd.consts.fakesmtpd_const import LOG_FORMAT
from app_fakesmtpd.servers.query_server import QueryServer
from app_fakesmtpd.servers.smtp_server import SMTPServer
from app_fakesmtpd.services.message_store import get_message_store

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = (
        'Start a fake SMTP server on <smtp-port> and its HTTP query API on <smtp-port> + 1. '
        'Each SMTP transaction is written to <message-dir> as a JSON file containing the '
        'smtp client id (timestamp from the beginning of the transaction), the sender, '
        'the recipients, and the combined headers and body as an array of strings.'
    )

    def get_version(self):
        return f"fakesmtpd {VERSION}"

    def add_arguments(self, parser):
        parser.add_argument(
            'smtp_port',
            type=int,
            help='SMTP port, incremented by 1 for the HTTP API port',
        )
        parser.add_argument(
            'message_dir',
            help='Directory where each SMTP transaction is written',
        )
        parser.add_argument(
            '-p', '--pidfile',
            default=None,
            help='Optional file where process PID will be written',
        )
        parser.add_argument(
            '-l', '--logfile',
            default=None,
            help='Optional file where all log messages will be written (default stderr)',
        )
        parser.add_argument(
            '--host',
            default=None,
            help='Address to bind both servers to',
        )

    def handle(self, *args, **options):
        """Start fakesmtpd"""
        config = get_app_config()
        smtp_port = options['smtp_port']
        message_dir = options['message_dir']
        pidfile = options.get('pidfile') or config['pidfile']
        host = options.get('host') or config['host']

        if options.get('logfile'):
            self._add_logfile(options['logfile'])

        Path(message_dir).mkdir(parents=True, exist_ok=True)
        store = get_message_store(message_dir)
        smtp_server = SMTPServer(store, host=host, port=smtp_port)
        query_server = QueryServer(store, host=host, port=get_query_port(smtp_port))

        try:
            asyncio.run(self._serve(smtp_server, query_server, pidfile))
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nStopping fakesmtpd...'))
        except Exception as e:
            self.stdout.write(self.style.ERROR(f'Failed to run fakesmtpd: {e}'))
            logger.exception("Failed to run fakesmtpd")
            raise

        self.stdout.write(self.style.SUCCESS('fakesmtpd stopped'))

    async def _serve(self, smtp_server: SMTPServer, query_server: QueryServer, pidfile: str):
        """Bind both servers, write the PID file and serve until SIGTERM"""
        query_server.start()
        tasks = []
        try:
            await smtp_server.start()

            Path(pidfile).write_text(f"{os.getpid()}\n")
            logger.info(f"[start_fakesmtpd] PID={os.getpid()} pidfile={pidfile}")
            self.stdout.write(self.style.SUCCESS('fakesmtpd is running. Press Ctrl+C to stop.'))

            stopping = asyncio.Event()
            try:
                asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, stopping.set)
            except NotImplementedError:
                # no loop signal handlers on Windows, SIGTERM ends the process
                pass

            tasks.append(asyncio.create_task(smtp_server.serve_forever()))
            await stopping.wait()
            logger.info("[start_fakesmtpd] Received SIGTERM")
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            smtp_server.stop()
            query_server.stop()

    @staticmethod
    def _add_logfile(logfile: str):
        handler = logging.FileHandler(logfile)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        for name in ('app_fakesmtpd', 'django.server'):
            logging.getLogger(name).addHandler(handler)
