"""Tests for acme_account.nonce."""
import sys
import unittest

import pytest

from acme_account import errors
from acme_account import messages
from acme_account._internal.tests import test_util
from acme_account.client import ClientNetwork
from acme_account.nonce import NonceSource


class NonceSourceTest(unittest.TestCase):
    """Tests for acme_account.nonce.NonceSource."""

    def setUp(self):
        self.authority = test_util.MockAuthority()
        self.net = ClientNetwork(session=self.authority)
        self.directory = messages.Directory.from_json(test_util.DIRECTORY)
        self.nonces = NonceSource(self.net)

    def _extract(self, headers):
        return self.nonces.extract(test_util.make_response(200, headers))

    def test_next(self):
        assert self.nonces.next(self.directory) == b'nonce-1'
        request = self.authority.sent[0]
        assert request.method == 'HEAD'
        assert request.url == test_util.DIRECTORY['newNonce']

    def test_next_is_never_cached(self):
        issued = [self.nonces.next(self.directory) for _ in range(3)]
        assert len(set(issued)) == 3
        assert len(self.authority.sent) == 3

    def test_next_missing_header(self):
        self.authority.omit_nonce_header = True
        with pytest.raises(errors.MissingNonce) as exc_info:
            self.nonces.next(self.directory)
        assert exc_info.value.field == 'Replay-Nonce'

    def test_next_retries(self):
        self.authority.fail(test_util.DIRECTORY['newNonce'], 500)
        assert self.nonces.next(self.directory)
        assert len(self.authority.sent) == 2

    def test_next_network_error(self):
        self.authority.fail(test_util.DIRECTORY['newNonce'], 500, 500, 500)
        with pytest.raises(errors.NetworkError):
            self.nonces.next(self.directory)

    def test_extract(self):
        assert self._extract({'Replay-Nonce': 'Zm9vYg'}) == b'foob'

    def test_extract_missing(self):
        with pytest.raises(errors.MissingNonce) as exc_info:
            self._extract({'Content-Type': 'text/plain'})
        assert 'replay nonce' in str(exc_info.value)
        assert isinstance(exc_info.value, errors.MissingFieldError)

    def test_extract_invalid(self):
        with pytest.raises(errors.BadNonce) as exc_info:
            self._extract({'Replay-Nonce': 'x'})
        assert exc_info.value.nonce == 'x'
        assert isinstance(exc_info.value, errors.DecodeError)

    def test_extract_empty(self):
        with pytest.raises(errors.BadNonce):
            self._extract({'Replay-Nonce': ''})


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
