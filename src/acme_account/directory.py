"""Directory discovery."""
import enum
import logging
import typing
from typing import Union

from acme_account import messages
from acme_account import util

if typing.TYPE_CHECKING:
    from acme_account.client import ClientNetwork  # pragma: no cover

logger = logging.getLogger(__name__)

LETSENCRYPT = 'https://acme-v02.api.letsencrypt.org/directory'
LETSENCRYPT_STAGING = 'https://acme-staging-v02.api.letsencrypt.org/directory'


class DirectoryUrl(enum.Enum):
    """Well-known ACME directories."""
    LETSENCRYPT = LETSENCRYPT
    """The main Let's Encrypt directory. Not appropriate for testing and dev."""
    LETSENCRYPT_STAGING = LETSENCRYPT_STAGING
    """Let's Encrypt staging. Issues certificates that are not trusted."""


def resolve_url(url: Union[DirectoryUrl, str]) -> str:
    """URL of a well-known directory, or ``url`` itself if it is a string."""
    if isinstance(url, DirectoryUrl):
        return url.value
    return url


class DirectoryClient:
    """Fetches directory documents.

    :ivar .ClientNetwork net: Client network.

    """

    def __init__(self, net: 'ClientNetwork') -> None:
        self.net = net

    def fetch(self, url: Union[DirectoryUrl, str]) -> messages.Directory:
        """Fetch and parse the directory at ``url``.

        :raises .NetworkError: if the directory could not be fetched.
        :raises .DecodeError: if the response is not a directory document.

        """
        dir_url = resolve_url(url)
        logger.debug('Fetching directory from %s', dir_url)
        response = self.net.get(dir_url)
        return util.read_json(response, messages.Directory)
