"""ACME accounts: get-or-create, and authenticated calls on behalf of an account."""
import logging
import typing
from typing import Callable
from typing import Optional

import requests

from acme_account import crypto_util
from acme_account import jws
from acme_account import messages
from acme_account import nonce as acme_nonce
from acme_account import persist as acme_persist
from acme_account import util

if typing.TYPE_CHECKING:
    from acme_account.client import ClientNetwork  # pragma: no cover

logger = logging.getLogger(__name__)

ACCOUNT_KEY_NAME = 'acme_account'


def account_key_handle(contact_email: str) -> acme_persist.PersistKey:
    """Where the account key of ``contact_email`` is persisted."""
    return acme_persist.PersistKey(contact_email, acme_persist.PersistKind.PRIVATE_KEY,
                                   ACCOUNT_KEY_NAME)


def signed_post(net: 'ClientNetwork', nonces: acme_nonce.NonceSource,
                directory: messages.Directory, url: str, key: crypto_util.AccountKey,
                obj: jws.Payload) -> Callable[[], requests.Request]:
    """Request builder for a signed POST of ``obj`` to ``url``.

    Each call of the returned function fetches a new nonce and signs again
    with the current state of ``key``, so it can be handed to
    `.ClientNetwork.execute` as is.

    """
    def build_request() -> requests.Request:
        nonce = nonces.next(directory)
        data = jws.sign_request(url, nonce, key, obj).json_dumps(indent=2)
        return requests.Request('POST', url, data=data,
                                headers={'Content-Type': net.JOSE_CONTENT_TYPE})
    return build_request


class Account:
    """A registered ACME account.

    Every request made through an account is signed with the account key in
    key id form, with a fresh nonce per attempt.

    :ivar messages.Directory directory: Directory the account belongs to.
    :ivar str contact_email: Contact the account was bootstrapped for.
    :ivar .AccountKey key: Account key, with its key id set.
    :ivar messages.Registration body: Account record returned by the server.

    """

    def __init__(self, directory: messages.Directory, net: 'ClientNetwork',
                 nonces: acme_nonce.NonceSource, contact_email: str,
                 key: crypto_util.AccountKey, body: messages.Registration) -> None:
        if key.key_id is None:
            raise ValueError('Account key has no key id')
        self._directory = directory
        self._net = net
        self._nonces = nonces
        self._contact_email = contact_email
        self._key = key
        self._body = body

    @property
    def directory(self) -> messages.Directory:
        """Directory the account belongs to."""
        return self._directory

    @property
    def contact_email(self) -> str:
        """Contact the account was bootstrapped for."""
        return self._contact_email

    @property
    def key(self) -> crypto_util.AccountKey:
        """Account key."""
        return self._key

    @property
    def uri(self) -> str:
        """Account URL, also the key id used in JWS headers."""
        return typing.cast(str, self._key.key_id)

    @property
    def body(self) -> messages.Registration:
        """Account record returned by the server."""
        return self._body

    def acme_private_key_pem(self) -> bytes:
        """Account private key as PEM."""
        return self._key.to_pem()

    def post(self, url: str, obj: jws.Payload = None) -> requests.Response:
        """POST ``obj`` to ``url``, signed by this account.

        :raises .TerminalCallError: if the server answered 400.
        :raises .NetworkError: if the attempts ran out.

        """
        return self._net.execute(signed_post(self._net, self._nonces, self._directory,
                                             url, self._key, obj))

    def post_as_get(self, url: str) -> requests.Response:
        """POST-as-GET ``url``: a signed POST with an empty payload."""
        return self.post(url, None)

    def refresh(self) -> 'Account':
        """Re-read the account record from the server.

        :returns: A new `Account` carrying the updated record.

        """
        response = self.post_as_get(self.uri)
        body = util.read_json(response, messages.Registration)
        return Account(self._directory, self._net, self._nonces, self._contact_email,
                       self._key, body)

    def __repr__(self) -> str:
        return '<{0}({1}, {2})>'.format(self.__class__.__name__, self._contact_email, self.uri)


class AccountBootstrap:
    """Creates or re-establishes the account of a contact email.

    :ivar .ClientNetwork net: Client network.
    :ivar .NonceSource nonces: Nonce source, one built on ``net`` if not provided.

    """

    def __init__(self, net: 'ClientNetwork',
                 nonces: Optional[acme_nonce.NonceSource] = None) -> None:
        self.net = net
        self.nonces = nonces if nonces is not None else acme_nonce.NonceSource(net)

    def bootstrap(self, directory: messages.Directory, contact_email: str,
                  persist: acme_persist.Persist) -> Account:
        """Get or create the account of ``contact_email``.

        If a persisted private key exists for the contact email, it is used,
        so the same ACME account is reused. If not, a key is generated and the
        corresponding account created. Either way the newAccount endpoint is
        called: for a known key the server answers with the existing account.

        A newly generated key is only persisted once the server has accepted it.

        :raises .NetworkError: if the server could not be reached.
        :raises .TerminalCallError: if the server rejected the registration.
        :raises .MissingFieldError: if the response has no Location header.
        :raises .DecodeError: if the persisted key or the response is malformed.
        :raises .PersistenceError: if ``persist`` failed.

        """
        pem_key = account_key_handle(contact_email)

        is_new = False
        pem = persist.get(pem_key)
        if pem is not None:
            logger.debug('Read persisted acme account key')
            key = crypto_util.AccountKey.load(pem)
        else:
            logger.debug('Create new acme account key')
            key = crypto_util.AccountKey.generate()
            is_new = True

        registration = messages.NewRegistration.from_data(
            email=contact_email, terms_of_service_agreed=True)
        url = directory['newAccount']

        logger.debug('Call new account endpoint: %s', url)
        response = self.net.execute(
            signed_post(self.net, self.nonces, directory, url, key, registration))
        kid = util.expect_header(response, 'Location')
        body = util.read_json(response, messages.Registration)
        key.set_key_id(kid)

        if is_new:
            logger.debug('Persist acme account key')
            persist.put(pem_key, key.to_pem())

        return Account(directory, self.net, self.nonces, contact_email, key, body)
