"""Crypto utilities: the ACME account key."""
import logging
from typing import Dict
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
import josepy as jose

from acme_account import errors

logger = logging.getLogger(__name__)

# JWS signature algorithm for each supported account key curve.
CURVE_ALGORITHMS: Dict[str, jose.JWASignature] = {
    ec.SECP256R1.name: jose.ES256,
    ec.SECP384R1.name: jose.ES384,
    ec.SECP521R1.name: jose.ES512,
}


class AccountKey:
    """Private key of an ACME account, plus the key id the server assigned to it.

    The key id is not part of the serialized key. It is re-established by
    calling the server's new-account endpoint, which returns the existing
    account for a key that is already registered.

    :ivar str key_id: Account URL assigned by the server, ``None`` until
        registration has been confirmed.

    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        curve = private_key.curve.name
        if curve not in CURVE_ALGORITHMS:
            raise errors.DecodeError('pem', f'Unsupported account key curve: {curve}')
        self._private_key = private_key
        self.jwk = jose.JWKEC(key=private_key)
        self.alg = CURVE_ALGORITHMS[curve]
        self._key_id: Optional[str] = None

    @classmethod
    def generate(cls) -> 'AccountKey':
        """Generate a fresh P-256 account key without a key id."""
        return cls(ec.generate_private_key(ec.SECP256R1()))

    @classmethod
    def load(cls, pem: bytes) -> 'AccountKey':
        """Load an account key from PEM.

        :param bytes pem: Unencrypted EC private key in PEM format.

        :raises .DecodeError: if ``pem`` is not a usable EC private key.

        """
        try:
            private_key = serialization.load_pem_private_key(pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as error:
            raise errors.DecodeError('pem', error)
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise errors.DecodeError(
                'pem', f'Account key must be an EC key, not {type(private_key).__name__}')
        return cls(private_key)

    def to_pem(self) -> bytes:
        """Serialize the private key (without key id) as PEM."""
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption())

    def public_key(self) -> jose.JWK:
        """Public half of the key as a JWK."""
        return self.jwk.public_key()

    @property
    def key_id(self) -> Optional[str]:
        """Account URL assigned by the server, if registered."""
        return self._key_id

    def set_key_id(self, key_id: str) -> None:
        """Record the account URL the server assigned to this key.

        :raises ValueError: if ``key_id`` is empty, or a different key id
            has already been set.

        """
        if not key_id:
            raise ValueError('Key id must not be empty')
        if self._key_id is not None and self._key_id != key_id:
            raise ValueError(f'Key id already set to {self._key_id}')
        logger.debug('Key id is: %s', key_id)
        self._key_id = key_id

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({self.alg.name}, key_id={self._key_id!r})>'
