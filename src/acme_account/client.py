"""ACME client API."""
import logging
from typing import Callable
from typing import Optional
from typing import Union

import josepy as jose
import requests
from requests.adapters import HTTPAdapter

from acme_account import account
from acme_account import directory as acme_directory
from acme_account import errors
from acme_account import messages
from acme_account import nonce
from acme_account import persist as acme_persist
from acme_account import util

logger = logging.getLogger(__name__)

DEFAULT_NETWORK_TIMEOUT = 30
MAX_ATTEMPTS = 3


class ClientNetwork:
    """Wrapper around requests that retries calls.

    Also adds user agent and timeouts. Each call is described by a function
    building a fresh `requests.Request`, which is invoked again for every
    attempt so that nonces and signatures are never reused.

    :param bool verify_ssl: Whether to verify certificates on SSL connections.
    :param str user_agent: String to send as User-Agent header.
    :param int timeout: Connect and read timeout of every attempt, in seconds.
    :param int max_attempts: Total attempts per call.
    :param requests.Session session: Session to send requests with. A new
        one is created if not provided.
    """
    JOSE_CONTENT_TYPE = 'application/jose+json'
    JSON_ERROR_CONTENT_TYPE = 'application/problem+json'
    REPLAY_NONCE_HEADER = 'Replay-Nonce'

    def __init__(self, verify_ssl: bool = True, user_agent: str = 'acme-account-python',
                 timeout: int = DEFAULT_NETWORK_TIMEOUT, max_attempts: int = MAX_ATTEMPTS,
                 session: Optional[requests.Session] = None) -> None:
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent
        self.max_attempts = max_attempts
        self._default_timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter()
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def __del__(self) -> None:
        # Try to close the session, but don't show exceptions to the
        # user if the call to close() fails.
        try:
            self.session.close()
        except Exception:  # pylint: disable=broad-except
            pass

    def _send_request(self, request: requests.Request) -> requests.Response:
        """Send one HTTP request.

        Makes sure that `verify_ssl` and the timeouts are respected. Logs
        request and response (with headers).

        :raises requests.exceptions.RequestException: in case of any problems

        """
        if request.method == "POST":
            logger.debug('Sending POST request to %s:\n%s', request.url, request.data)
        else:
            logger.debug('Sending %s request to %s.', request.method, request.url)
        request.headers.setdefault('User-Agent', self.user_agent)
        prepared = self.session.prepare_request(request)
        settings = self.session.merge_environment_settings(
            prepared.url, {}, None, self.verify_ssl, None)
        response = self.session.send(
            prepared, timeout=(self._default_timeout, self._default_timeout), **settings)
        logger.debug('Received response:\nHTTP %d\n%s\n\n%s',
                     response.status_code,
                     "\n".join("{0}: {1}".format(k, v)
                               for k, v in response.headers.items()),
                     util.response_text(response))
        return response

    def execute(self, build_request: Callable[[], requests.Request]) -> requests.Response:
        """Send a request, retrying transient failures.

        ``build_request`` is called once per attempt. A 2xx response is
        returned, a 400 fails at once, anything else (including transport
        errors) is retried until `max_attempts` attempts have been made.

        :raises .TerminalCallError: if the server answered 400.
        :raises .NetworkError: if the attempts ran out.

        """
        attempts = 0
        while True:
            request = build_request()
            attempts += 1
            try:
                response = self._send_request(request)
            except requests.exceptions.RequestException as error:
                logger.debug('Request to %s failed: %s', request.url, error)
                if attempts >= self.max_attempts:
                    logger.debug('No more retries')
                    raise errors.NetworkError(None, None, attempts) from error
                logger.debug('Retry call')
                continue

            if 200 <= response.status_code < 300:
                return response

            body = util.response_text(response)
            if response.status_code == 400:
                logger.debug('Bad request, not retrying')
                raise errors.TerminalCallError(response.status_code, body,
                                               self._parse_problem(response))
            if attempts >= self.max_attempts:
                logger.debug('No more retries')
                raise errors.NetworkError(response.status_code, body, attempts)
            logger.debug('Retry call')

    @classmethod
    def _parse_problem(cls, response: requests.Response) -> Optional[messages.Error]:
        try:
            jobj = response.json()
        except ValueError:
            return None
        if not isinstance(jobj, dict):
            return None
        response_ct = response.headers.get('Content-Type', '').split(';')[0].strip()
        if response_ct != cls.JSON_ERROR_CONTENT_TYPE:
            logger.debug('Ignoring wrong Content-Type (%r) for JSON Error', response_ct)
        try:
            return messages.Error.from_json(jobj)
        except jose.DeserializationError as error:
            logger.debug('Response is not a problem document: %s', error)
            return None

    def head(self, url: str) -> requests.Response:
        """Send HEAD request with retries."""
        return self.execute(lambda: requests.Request('HEAD', url))

    def get(self, url: str) -> requests.Response:
        """Send GET request with retries."""
        return self.execute(lambda: requests.Request('GET', url))


class ClientV2:
    """ACME client for a v2 API, bound to one directory and one persistence backend.

    :ivar messages.Directory directory:
    :ivar .ClientNetwork net: Client network.
    :ivar .Persist persist: Where account keys are kept.
    """

    def __init__(self, directory: messages.Directory, net: ClientNetwork,
                 persist: acme_persist.Persist) -> None:
        """Initialize.

        :param .messages.Directory directory: Directory Resource
        :param .ClientNetwork net: Client network.
        :param .Persist persist: Persistence backend.
        """
        self.directory = directory
        self.net = net
        self.persist = persist
        self.nonces = nonce.NonceSource(net)

    @classmethod
    def from_url(cls, url: Union[acme_directory.DirectoryUrl, str],
                 persist: acme_persist.Persist,
                 net: Optional[ClientNetwork] = None) -> 'ClientV2':
        """Fetch the directory at ``url`` and create a client for it.

        :param url: A well-known `.DirectoryUrl` or any directory URL.
        :param .Persist persist: Persistence backend.
        :param .ClientNetwork net: Client network, a default one if not provided.

        """
        if net is None:
            net = ClientNetwork()
        directory = acme_directory.DirectoryClient(net).fetch(url)
        return cls(directory, net, persist)

    def account(self, contact_email: str) -> account.Account:
        """Access the account identified by ``contact_email``.

        A persisted account key for the email is reused, otherwise a new key
        is generated and the account created. Either way the newAccount
        endpoint is called, which makes sure the account is active.

        """
        bootstrap = account.AccountBootstrap(self.net, self.nonces)
        return bootstrap.bootstrap(self.directory, contact_email, self.persist)

    def new_nonce(self) -> bytes:
        """Fetch a fresh nonce."""
        return self.nonces.next(self.directory)
