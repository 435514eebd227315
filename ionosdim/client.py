#
#
#

import logging
from concurrent.futures import Future
from threading import Event, Lock, Thread

from requests import Session
from requests.exceptions import RequestException

from . import __version__ as package_version
from .exceptions import (
    DimClientCanceled,
    DimClientConfigError,
    DimClientDecodeError,
    DimClientNotFound,
    DimClientRemoteError,
    DimClientTransportError,
    DimClientUnauthorized,
)


class DimClient(object):
    '''JSON-RPC client for a DIM endpoint.

    The session token is either supplied or obtained by logging in once at
    construction. Concurrent callers only read it; with `relogin=True` a
    rejected session is replaced under a lock and the call retried once.
    '''

    COOKIE = 'session'
    TIMEOUT = 10

    def __init__(
        self,
        endpoint,
        token=None,
        username=None,
        password=None,
        timeout=None,
        relogin=False,
    ):
        self.log = logging.getLogger('DimClient')
        self.log.debug(
            '__init__: endpoint=%s, token=%s, username=%s, password=***, '
            'relogin=%s',
            endpoint,
            '***' if token else None,
            username,
            relogin,
        )
        self.endpoint = (endpoint or '').rstrip('/')
        if not self.endpoint:
            raise DimClientConfigError(
                'DIM endpoint must be specified, '
                'e.g. https://dim.example.com/dim'
            )
        if not token and not (username and password):
            raise DimClientConfigError(
                'DIM username and password must be specified when no token '
                'is given'
            )

        self.timeout = timeout or self.TIMEOUT
        self.relogin = relogin
        self._username = username
        self._password = password
        self._token_lock = Lock()

        session = Session()
        session.headers.update({'User-Agent': f'ionosdim/{package_version}'})
        self._session = session

        try:
            self._token = token or self._login()
        except Exception:
            session.close()
            raise

    @property
    def token(self):
        return self._token

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self._session.close()

    # --- Session -----------------------------------------------------------

    def _login(self, cancel=None):
        if not (self._username and self._password):
            raise DimClientConfigError(
                'DIM username and password must be specified to log in'
            )
        self.log.debug('_login: username=%s, password=***', self._username)
        response = self._send(
            'login',
            f'{self.endpoint}/login',
            cancel,
            data={'username': self._username, 'password': self._password},
        )
        token = self._session_cookie(response)
        if not token:
            raise DimClientTransportError(
                'login: could not obtain session cookie',
                status_code=response.status_code,
            )
        self.log.info('_login: obtained session for %s', self._username)
        return token

    def _session_cookie(self, response):
        for r in [response] + list(reversed(response.history)):
            token = r.cookies.get(self.COOKIE)
            if token:
                return token
        return None

    def _refresh(self, stale, cancel=None):
        with self._token_lock:
            # another caller may have already replaced the stale token
            if self._token == stale:
                self._token = self._login(cancel)
            return self._token

    def _can_relogin(self):
        return bool(self.relogin and self._username and self._password)

    # --- Transport ---------------------------------------------------------

    def _post_in_background(self, method, url, **kwargs):
        future = Future()

        def run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._session.post(url, **kwargs))
            except Exception as e:
                future.set_exception(e)

        # one thread per request, an abandoned one never delays later calls
        Thread(target=run, name=f'dim-rpc-{method}', daemon=True).start()
        return future

    def _send(self, method, url, cancel=None, **kwargs):
        kwargs.setdefault('timeout', self.timeout)
        try:
            if cancel is None:
                return self._session.post(url, **kwargs)
            return self._send_cancellable(method, url, cancel, **kwargs)
        except RequestException as e:
            raise DimClientTransportError(
                f'{method}: could not perform DIM request, {e}'
            ) from e

    def _send_cancellable(self, method, url, cancel, **kwargs):
        cancel.raise_if_cancelled(method)
        future = self._post_in_background(method, url, **kwargs)
        settled = Event()
        future.add_done_callback(lambda _: settled.set())
        unregister = cancel.on_cancel(settled.set)
        try:
            settled.wait()
        finally:
            unregister()
        if not future.done():
            future.cancel()
            future.add_done_callback(self._discard_response)
            self.log.debug('_send: method=%s, %s', method, cancel.reason)
            raise DimClientCanceled(method, cancel.reason)
        return future.result()

    @staticmethod
    def _discard_response(future):
        if not future.cancelled() and future.exception() is None:
            future.result().close()

    def _do(self, method, params, token, cancel=None):
        payload = {
            'jsonrpc': '2.0',
            'method': method,
            'params': list(params),
            'id': None,
        }
        self.log.debug('_do: method=%s, params=%s', method, payload['params'])
        response = self._send(
            method,
            f'{self.endpoint}/jsonrpc',
            cancel,
            json=payload,
            cookies={self.COOKIE: token},
        )
        status = response.status_code
        if status in (401, 403):
            raise DimClientUnauthorized(
                f'{method}: status: {status}, body: {response.text}',
                status_code=status,
                body=response.text,
            )
        if not 200 <= status < 300:
            raise DimClientTransportError(
                f'{method}: status: {status}, body: {response.text}',
                status_code=status,
                body=response.text,
            )
        return response

    # --- RPC ---------------------------------------------------------------

    def _decode(self, method, response):
        # DIM answers with text/html even for JSON, and a wrong endpoint may
        # serve an SSO page with status 200, so parse whatever came back.
        try:
            data = response.json()
        except ValueError as e:
            raise DimClientDecodeError(method, e) from e
        if not isinstance(data, dict):
            raise DimClientDecodeError(
                method, f'expected a JSON object, got {type(data).__name__}'
            )

        error = data.get('error') or {}
        if not isinstance(error, dict):
            raise DimClientDecodeError(
                method, f'malformed error object {error!r}'
            )
        code = error.get('code') or 0
        if code != 0:
            message = error.get('message', '')
            if code == DimClientRemoteError.NOT_FOUND:
                raise DimClientNotFound(method, code, message)
            raise DimClientRemoteError(method, code, message)
        return data.get('result')

    def _invoke(self, method, params, token, cancel):
        response = self._do(method, params, token, cancel)
        result = self._decode(method, response)
        self.log.debug('_invoke: method=%s, result=%s', method, result)
        return result

    def raw_call(self, method, params=(), cancel=None):
        '''Call `method` with positional `params` and return its result.

        The result is the decoded JSON value, its shape depends on the
        method. See `ionosdim.results` for narrowing it.
        '''
        token = self._token
        try:
            return self._invoke(method, params, token, cancel)
        except (DimClientUnauthorized, DimClientDecodeError) as e:
            if not self._can_relogin():
                raise
            self.log.info(
                'raw_call: method=%s, session rejected (%s), logging in again',
                method,
                e,
            )
            token = self._refresh(token, cancel)
            return self._invoke(method, params, token, cancel)

    def call(self, method, *params, cancel=None):
        return self.raw_call(method, params, cancel=cancel)
