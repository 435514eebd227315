#
#
#

from octodns.provider import ProviderException


class DimException(ProviderException):
    pass


class DimClientException(DimException):
    pass


class DimClientConfigError(DimClientException):
    pass


class DimClientTransportError(DimClientException):
    def __init__(self, msg, status_code=None, body=None):
        super().__init__(msg)
        self.status_code = status_code
        self.body = body


class DimClientUnauthorized(DimClientTransportError):
    pass


class DimClientCanceled(DimClientTransportError):
    def __init__(self, method, reason='canceled'):
        super().__init__(f'{method}: request {reason}')
        self.method = method
        self.reason = reason


class DimClientDecodeError(DimClientException):
    def __init__(self, method, detail):
        super().__init__(
            f'{method}: could not decode DIM response ({detail}); '
            'is the endpoint URL correct and the session still valid?'
        )
        self.method = method


class DimClientRemoteError(DimClientException):
    NOT_FOUND = 1

    def __init__(self, method, code, message):
        super().__init__(f'{method} error ({code}): {message}')
        self.method = method
        self.code = code
        self.message = message

    @property
    def not_found(self):
        return self.code == self.NOT_FOUND


class DimClientNotFound(DimClientRemoteError):
    pass


class DimClientResultError(DimClientException):
    pass


class DimIdentifierError(DimException):
    pass


class DimIdentifierDrift(DimException):
    def __init__(self, old, new):
        super().__init__(f'ID has changed, old={old}, new={new}')
        self.old = old
        self.new = new


class DimResourceError(DimException):
    pass
