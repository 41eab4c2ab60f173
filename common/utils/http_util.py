import traceback

from rest_framework import status as http_status
from rest_framework.negotiation import BaseContentNegotiation
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from common.consts.http_const import CONTENT_TYPE_JSON


class PrettyJSONRenderer(JSONRenderer):
    """JSON indented by two spaces, followed by a newline"""

    def get_indent(self, accepted_media_type, renderer_context):
        return 2

    def render(self, data, accepted_media_type=None, renderer_context=None):
        content = super().render(data, accepted_media_type, renderer_context)
        if not content:
            return content
        return content + b'\n'


class IgnoreClientContentNegotiation(BaseContentNegotiation):
    """Always answer with the first renderer, whatever the Accept header says"""

    def select_parser(self, request, parsers):
        return parsers[0] if parsers else None

    def select_renderer(self, request, renderers, format_suffix=None):
        return renderers[0], renderers[0].media_type


class JSONResponse(Response):
    """Response that keeps its Content-Type even without a body"""

    def __init__(self, data=None, status=None, headers=None, content_type=CONTENT_TYPE_JSON):
        super().__init__(data, status=status, headers=headers, content_type=content_type)

    @property
    def rendered_content(self):
        content = super().rendered_content
        self['Content-Type'] = self.content_type
        return content


def resp_ok(data=None, status=http_status.HTTP_200_OK):
    return JSONResponse(data, status=status)


def resp_no_content():
    return JSONResponse(status=http_status.HTTP_204_NO_CONTENT)


def resp_err(message, data=None, status=http_status.HTTP_404_NOT_FOUND):
    """
    错误响应

    @param message: error description
    @param data: extra fields of the payload
    @param status: http status
    @return: payload with an "error" field
    """
    payload = dict(data or {})
    payload['error'] = message
    return JSONResponse(payload, status=status)


def resp_exception(e: Exception, data=None, status=http_status.HTTP_500_INTERNAL_SERVER_ERROR):
    """
    异常响应

    @param e: exception being answered
    @param data: extra fields of the payload
    @param status: http status
    @return: payload with "error" and "backtrace" fields
    """
    payload = dict(data or {})
    payload['error'] = f"{type(e).__name__} {e}"
    payload['backtrace'] = [line.rstrip() for line in traceback.format_tb(e.__traceback__)]
    return JSONResponse(payload, status=status)
