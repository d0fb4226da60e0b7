"""ACME-specific JWS.

The JWS implementation in josepy only implements the base JOSE standard. In
order to support the new header fields defined in ACME, this module defines some
ACME-specific classes that layer on top of josepy, and `sign_request`, which
builds the signed envelope for every authenticated call.
"""
import json
import logging
import typing
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Union

import josepy as jose

if typing.TYPE_CHECKING:
    from acme_account.crypto_util import AccountKey  # pragma: no cover

logger = logging.getLogger(__name__)

Payload = Union[jose.JSONDeSerializable, Mapping[str, Any], None]


class Header(jose.Header):
    """ACME-specific JOSE Header. Implements nonce, kid, and url.
    """
    nonce: Optional[bytes] = jose.field('nonce', omitempty=True, encoder=jose.encode_b64jose)
    kid: Optional[str] = jose.field('kid', omitempty=True)  # type: ignore[assignment]
    url: Optional[str] = jose.field('url', omitempty=True)

    # Mypy does not understand the josepy magic happening here, and falsely claims
    # that nonce is redefined. Let's ignore the type check here.
    @nonce.decoder  # type: ignore[no-redef,attr-defined,union-attr]
    def nonce(value: str) -> bytes:  # type: ignore[misc]  # pylint: disable=no-self-argument,missing-function-docstring
        try:
            return jose.decode_b64jose(value)
        except jose.DeserializationError as error:
            raise jose.DeserializationError("Invalid nonce: {0}".format(error))


class Signature(jose.Signature):
    """ACME-specific Signature. Uses ACME-specific Header for customer fields."""
    __slots__ = jose.Signature._orig_slots  # type: ignore[attr-defined]  # pylint: disable=protected-access,no-member

    header_cls = Header
    header: Header = jose.field(
        'header', omitempty=True, default=header_cls(),
        decoder=header_cls.from_json)


class JWS(jose.JWS):
    """ACME-specific JWS. Includes nonce, url, and kid in protected header."""
    signature_cls = Signature
    __slots__ = jose.JWS._orig_slots  # type: ignore[attr-defined]  # pylint: disable=protected-access

    @classmethod
    # type: ignore[override]  # pylint: disable=arguments-differ
    def sign(cls, payload: bytes, key: jose.JWK, alg: jose.JWASignature, nonce: Optional[bytes],
             url: Optional[str] = None, kid: Optional[str] = None) -> jose.JWS:
        # Per RFC 8555, jwk and kid are mutually exclusive, so only include a
        # jwk field if kid is not provided.
        include_jwk = kid is None
        return super().sign(payload, key=key, alg=alg,
                            protect=frozenset(['nonce', 'url', 'kid', 'jwk', 'alg']),
                            nonce=nonce, url=url, kid=kid,
                            include_jwk=include_jwk)


def encode_payload(obj: Payload) -> bytes:
    """Serialize a request payload; ``None`` gives the empty POST-as-GET payload."""
    if obj is None:
        return b''
    if isinstance(obj, jose.JSONDeSerializable):
        return obj.json_dumps(indent=2).encode()
    return json.dumps(obj, indent=2).encode()


def sign_request(url: str, nonce: bytes, key: 'AccountKey', obj: Payload = None) -> JWS:
    """Wrap a request payload in a JWS addressed to ``url``.

    The protected header carries the account key id once ``key`` has one,
    and the public JWK before that.

    :param str url: The URL the envelope will be POSTed to.
    :param bytes nonce: Fresh nonce, as decoded from the Replay-Nonce header.
    :param .AccountKey key: Account key to sign with.
    :param obj: Payload object, or ``None`` for an empty payload.

    :rtype: `JWS`

    """
    payload = encode_payload(obj)
    logger.debug('JWS payload:\n%s', payload)
    return JWS.sign(payload, key=key.jwk, alg=key.alg, nonce=nonce,
                    url=url, kid=key.key_id)
