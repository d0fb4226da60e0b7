"""ACME client errors."""
import typing
from typing import Any
from typing import Mapping
from typing import Optional

if typing.TYPE_CHECKING:
    from acme_account import messages  # pragma: no cover


class Error(Exception):
    """Generic ACME client error."""


class ClientError(Error):
    """Error talking to the ACME server."""


class NetworkError(ClientError):
    """Transport failure, or transient failures until the attempts ran out.

    :ivar int status: HTTP status of the last attempt, ``None`` if the last
        attempt did not get a response at all.
    :ivar str body: Response body of the last attempt, if any.
    :ivar int attempts: Number of attempts made.

    """
    def __init__(self, status: Optional[int], body: Optional[str], attempts: int,
                 *args: Any) -> None:
        super().__init__(*args)
        self.status = status
        self.body = body
        self.attempts = attempts

    def __str__(self) -> str:
        if self.status is None:
            reason = str(self.__cause__ or 'no response')
            return f'Call failed after {self.attempts} attempt(s): {reason}'
        return f'Call failed ({self.status}) after {self.attempts} attempt(s): {self.body}'


class TerminalCallError(ClientError):
    """Server rejected the request with a status that is not worth retrying.

    :ivar int status: HTTP status code.
    :ivar str body: Response body.
    :ivar problem: Problem document parsed from ``body``, or ``None``.
    :vartype problem: `.messages.Error`

    """
    def __init__(self, status: int, body: str,
                 problem: Optional['messages.Error'] = None) -> None:
        super().__init__()
        self.status = status
        self.body = body
        self.problem = problem

    def __str__(self) -> str:
        if self.problem is not None:
            return f'Call failed ({self.status}): {self.problem}'
        return f'Call failed ({self.status}): {self.body}'


class MissingFieldError(ClientError):
    """Expected response header or body field is absent.

    :ivar str field: Name of the missing header or field.

    """
    def __init__(self, field: str, *args: Any) -> None:
        super().__init__(*args)
        self.field = field

    def __str__(self) -> str:
        return f'Missing field: {self.field}'


class MissingNonce(MissingFieldError):
    """Missing nonce error.

    The new-nonce endpoint answered successfully but without a
    Replay-Nonce header.

    :ivar headers: Mapping of HTTP headers

    """
    def __init__(self, headers: Mapping[str, str], *args: Any) -> None:
        super().__init__('Replay-Nonce', *args)
        self.headers = dict(headers)

    def __str__(self) -> str:
        return ('Server response did not include a replay '
                'nonce, headers: {0} (This may be a service outage)'.format(
                    self.headers))


class DecodeError(Error):
    """Malformed JSON, PEM, base64 or message input.

    :ivar str what: What was being decoded.
    :ivar error: Underlying error or message.

    """
    def __init__(self, what: str, error: Any, *args: Any) -> None:
        super().__init__(*args)
        self.what = what
        self.error = error

    def __str__(self) -> str:
        return f'Failed to decode {self.what}: {self.error}'


class BadNonce(DecodeError):
    """Bad nonce error."""
    def __init__(self, nonce: str, error: Any, *args: Any) -> None:
        super().__init__('nonce', error, *args)
        self.nonce = nonce

    def __str__(self) -> str:
        return 'Invalid nonce ({0!r}): {1}'.format(self.nonce, self.error)


class PersistenceError(Error):
    """Failure reported by a persistence backend.

    :ivar error: The backend's own error.

    """
    def __init__(self, error: Any, *args: Any) -> None:
        super().__init__(*args)
        self.error = error

    def __str__(self) -> str:
        return f'Persistence failure: {self.error}'
