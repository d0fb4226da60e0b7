"""Replay nonces."""
import logging
import typing

import josepy as jose
import requests

from acme_account import errors
from acme_account import jws
from acme_account import messages

if typing.TYPE_CHECKING:
    from acme_account.client import ClientNetwork  # pragma: no cover

logger = logging.getLogger(__name__)


class NonceSource:
    """Issues one fresh nonce per call from the directory's newNonce endpoint.

    Nonces are never cached: every signed request, including each retry of
    the same call, must use a nonce of its own.

    :ivar .ClientNetwork net: Client network.

    """

    def __init__(self, net: 'ClientNetwork') -> None:
        self.net = net

    def next(self, directory: messages.Directory) -> bytes:
        """Request a fresh nonce.

        :returns: The nonce, decoded from its base64url header value.

        :raises .MissingNonce: if the response carries no Replay-Nonce header.
        :raises .BadNonce: if the header is not valid base64url.

        """
        logger.debug('Requesting fresh nonce')
        url = directory['newNonce']
        response = self.net.execute(lambda: requests.Request('HEAD', url))
        return self.extract(response)

    def extract(self, response: requests.Response) -> bytes:
        """Decode the Replay-Nonce header of ``response``."""
        header = self.net.REPLAY_NONCE_HEADER
        if header not in response.headers:
            raise errors.MissingNonce(response.headers)
        value = response.headers[header]
        try:
            decoded_nonce = jws.Header._fields['nonce'].decode(value)  # pylint: disable=protected-access
        except jose.DeserializationError as error:
            raise errors.BadNonce(value, error)
        if not decoded_nonce:
            raise errors.BadNonce(value, 'empty nonce')
        logger.debug('Using nonce: %s', value)
        return decoded_nonce
