"""
Request ID middleware for request tracing and logging
"""
import re
import uuid

from flask import g, has_request_context, request

REQUEST_ID_HEADER = 'X-Request-ID'

# Upstream ids end up verbatim in log lines
_VALID_REQUEST_ID = re.compile(r'^[A-Za-z0-9._:-]{1,128}$')


def _incoming_request_id(environ):
    candidate = environ.get('HTTP_X_REQUEST_ID', '')
    if _VALID_REQUEST_ID.match(candidate):
        return candidate
    return str(uuid.uuid4())


class RequestIdMiddleware:
    """
    WSGI middleware that tags each request with an id

    A well-formed upstream X-Request-ID is kept so traces line up across
    services; anything else is replaced with a fresh uuid. The id is echoed
    back on the response.
    """

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        request_id = _incoming_request_id(environ)
        environ['request_id'] = request_id

        def start_response_with_id(status, headers, exc_info=None):
            headers.append((REQUEST_ID_HEADER, request_id))
            return start_response(status, headers, exc_info)

        return self.app(environ, start_response_with_id)


def current_request_id():
    """Id of the request being served, or '-' outside a request"""
    if not has_request_context():
        return '-'
    return request.environ.get('request_id', '-')


def init_request_id(app):
    """Wrap the WSGI app and expose the id on `g` for each request"""
    app.wsgi_app = RequestIdMiddleware(app.wsgi_app)

    @app.before_request
    def bind_request_id():
        g.request_id = current_request_id()
