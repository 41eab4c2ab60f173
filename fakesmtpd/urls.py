"""fakesmtpd URL Configuration

The query API owns the whole URL space of its port.
"""

from django.urls import path, include

urlpatterns = [
    path('', include('app_fakesmtpd.urls')),
]
