"""
K8s API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code of the gateway.
Hence, we have our own hierarchy of exceptions for K8s API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
etc, are escalated from the client library as is, since they are related not
to the domain of K8s API, but rather to the networking and encryption.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

Some selected reasons of K8s API errors are made into their own classes,
so that they could be intercepted and handled in other places of the gateway.
All other reasons are raised as the base error class and are indistinguishable
from each other (except via the exception's fields).

Unlike the underlying client library's errors, the K8s API errors contain more
information about the reasons -- as provided by K8s API in its response bodies,
not guessed only by HTTP statuses alone.
"""
import collections.abc
import json
from collections.abc import Collection

import aiohttp
from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class APIError(Exception):

    def __init__(
            self,
            payload: RawStatus | None,
            *,
            status: int,
            phrase: str | None = None,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message or phrase, payload)
        self._status = status
        self._phrase = phrase
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def phrase(self) -> str | None:
        """ The HTTP reason phrase, e.g. "Not Found" (not the K8s reason). """
        return self._phrase

    @property
    def code(self) -> int | None:
        return self._payload.get('code') if self._payload else None

    @property
    def reason(self) -> str | None:
        """ The K8s reason of the failure, e.g. "NotFound", "Invalid", "AlreadyExists". """
        return self._payload.get('reason') if self._payload else None

    @property
    def message(self) -> str | None:
        return self._payload.get('message') if self._payload else None

    @property
    def details(self) -> RawStatusDetails | None:
        return self._payload.get('details') if self._payload else None


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


class APIUnprocessableError(APIError):
    pass


class APIResponseError(APIError):
    """ A response is received, but its body cannot be parsed. """


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for specialised K8s errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        payload: RawStatus | None
        try:
            payload = await response.json(content_type=None)
        except (json.JSONDecodeError, UnicodeDecodeError, aiohttp.ClientConnectionError):
            payload = None

        # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
        if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
            payload = None

        cls = (
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIConflictError if response.status == 409 else
            APIUnprocessableError if response.status == 422 else
            APIError
        )

        # Raise the gateway-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload, status=response.status, phrase=response.reason) from e
