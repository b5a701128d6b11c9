"""
The failures of the gateway, as seen by its callers.

All faults of all operations are converted to one shape: a status code,
a body, and a message. The callers (e.g. the REST façade) do not need
to know about the HTTP client library or the K8s API errors below.

* Transport failures happen before any HTTP response is received:
  the status code is 0, there is no body, and the message is the fault's
  description as rendered by :func:`describe` (including the chained causes).
* Remote rejections come from the API: the status code is the HTTP status,
  the body is the K8s reason (e.g. "Invalid", "NotFound"), and the message
  is the API's own message, all verbatim.
* Invalid requests are rejected before any network call is attempted:
  the status code is 0, there is no body, the message is fixed.
"""
from gaas._cogs.clients import errors

MISSING_BODY_MESSAGE = "Missing the required parameter 'body' when calling createNamespacedCustomObject(Async)"
MISSING_NAME_MESSAGE = "Missing the required parameter 'name' when calling deleteNamespacedCustomObject(Async)"


class GaasRestApiError(Exception):

    def __init__(
            self,
            message: str,
            *,
            status_code: int = 0,
            body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    def __repr__(self) -> str:
        return (f'{self.__class__.__name__}({self.message!r}, '
                f'status_code={self.status_code!r}, body={self.body!r})')


class TransportFailure(GaasRestApiError):
    pass


class RemoteRejection(GaasRestApiError):
    pass


class InvalidRequest(GaasRestApiError):
    pass


def describe(exc: BaseException) -> str:
    """
    Render an exception with its qualified class name and its chained causes.

    E.g.: ``aiohttp.client_exceptions.ServerTimeoutError: connect timed out``.
    The built-in exceptions are rendered without the module: ``TimeoutError``.
    """
    cls = type(exc)
    name = cls.__qualname__ if cls.__module__ == 'builtins' else f'{cls.__module__}.{cls.__qualname__}'
    text = str(exc)
    rendered = f'{name}: {text}' if text else name
    if exc.__cause__ is not None:
        rendered += f'; caused by {describe(exc.__cause__)}'
    return rendered


def from_api_error(exc: errors.APIError) -> RemoteRejection:
    message = exc.message
    if message is None and isinstance(exc, errors.APIResponseError) and exc.__cause__ is not None:
        message = describe(exc.__cause__)
    return RemoteRejection(
        message or exc.phrase or f'HTTP {exc.status}',
        status_code=exc.status,
        body=exc.reason,
    )


def from_transport_error(exc: BaseException) -> TransportFailure:
    return TransportFailure(describe(exc))
