#
# Shared fakes for tests
#

from requests import Response


def dim_response(body='', status=200, cookies=None, history=None):
    response = Response()
    response.status_code = status
    response._content = body.encode('utf-8') if isinstance(body, str) else body
    response._content_consumed = True
    response.encoding = 'utf-8'
    for name, value in (cookies or {}).items():
        response.cookies.set(name, value)
    response.history = history or []
    return response
