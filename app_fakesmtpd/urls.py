from django.urls import path, re_path

from app_fakesmtpd.views.message_view import (
    RootView,
    MessageListView,
    MessageDetailView,
    NotFoundView,
)

# URL patterns for the message query API, served on SMTP port + 1
# by the start_fakesmtpd command

urlpatterns = [
    path('', RootView.as_view(), name='fakesmtpd-root'),
    path('messages', MessageListView.as_view(), name='message-list'),
    re_path(r'^messages/(?P<message_id>[0-9]+)$', MessageDetailView.as_view(), name='message-detail'),
    # everything else
    re_path(r'', NotFoundView.as_view(), name='not-found'),
]
