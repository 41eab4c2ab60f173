"""
WSGI config for fakesmtpd.

Served by the query server of the start_fakesmtpd command.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "fakesmtpd.settings")

application = get_wsgi_application()
