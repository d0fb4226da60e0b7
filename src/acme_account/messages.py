"""ACME protocol messages used by account bootstrap."""
import enum
from collections.abc import Mapping
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from typing import Type
from typing import TypeVar

import josepy as jose

ERROR_PREFIX = 'urn:ietf:params:acme:error:'

# RFC 8555, section 6.7: the error types an account bootstrap can run into.
ERROR_CODES = {
    'accountDoesNotExist': 'The request specified an account that does not exist',
    'badNonce': 'The client sent an unacceptable anti-replay nonce',
    'badPublicKey': 'The JWS was signed by a public key the server does not support',
    'badSignatureAlgorithm': 'The JWS was signed with an algorithm the server does not support',
    'compound': 'Specific error conditions are indicated in the "subproblems" array',
    'externalAccountRequired': 'The request must include a value for the '
                               '"externalAccountBinding" field',
    'invalidContact': 'A contact URL for an account was invalid',
    'malformed': 'The request message was malformed',
    'rateLimited': 'The request exceeds a rate limit',
    'serverInternal': 'The server experienced an internal error',
    'unauthorized': 'The client lacks sufficient authorization',
    'unsupportedContact': 'A contact URL for an account used an unsupported protocol scheme',
    'userActionRequired': 'Visit the "instance" URL and take actions specified there',
}

# Entries every directory must advertise for an account to be bootstrapped.
REQUIRED_DIRECTORY_FIELDS = ('newNonce', 'newAccount', 'newOrder')


class Status(enum.Enum):
    """ACME account "status" field."""
    VALID = 'valid'
    DEACTIVATED = 'deactivated'
    REVOKED = 'revoked'

    @classmethod
    def from_json(cls, jobj: Any) -> 'Status':
        try:
            return cls(jobj)
        except (ValueError, TypeError):
            raise jose.DeserializationError(f'{cls.__name__} not recognized: {jobj!r}')

    def to_json(self) -> str:
        return self.value


class Error(jose.JSONObjectWithFields):
    """ACME problem document.

    https://datatracker.ietf.org/doc/html/rfc7807

    :ivar str typ:
    :ivar str title:
    :ivar str detail:
    :ivar tuple subproblems: Problems of the individual parts of a compound
        error, `tuple` of `Error`.

    """
    typ: str = jose.field('type', omitempty=True, default='about:blank')
    title: str = jose.field('title', omitempty=True)
    detail: str = jose.field('detail', omitempty=True)
    subproblems: Optional[Tuple['Error', ...]] = jose.field('subproblems', omitempty=True)

    # Mypy does not understand the josepy magic happening here, and falsely claims
    # that subproblems is redefined. Let's ignore the type check here.
    @subproblems.decoder  # type: ignore
    def subproblems(value: List[Dict[str, Any]]) -> Tuple['Error', ...]:  # pylint: disable=no-self-argument,missing-function-docstring
        return tuple(Error.from_json(subproblem) for subproblem in value)

    @property
    def code(self) -> Optional[str]:
        """ACME error code, ``typ`` without `ERROR_PREFIX`.

        ``None`` if ``typ`` is not a known ACME error type.

        """
        if not str(self.typ).startswith(ERROR_PREFIX):
            return None
        code = self.typ[len(ERROR_PREFIX):]
        return code if code in ERROR_CODES else None

    @property
    def description(self) -> Optional[str]:
        """Description of the error type, if it is a known ACME error."""
        return ERROR_CODES.get(self.code) if self.code is not None else None

    def __str__(self) -> str:
        parts = [part for part in (self.typ, self.description, self.detail, self.title)
                 if part is not None]
        lines = [' :: '.join(parts)]
        lines.extend(str(subproblem) for subproblem in self.subproblems or ())
        return '\n'.join(lines)


class Directory(jose.JSONDeSerializable):
    """Directory.

    Directory resources must be accessed by the exact field name in RFC8555 (section 9.7.5).
    Entries this client does not know about are kept as they are.
    """

    class Meta(jose.JSONObjectWithFields):
        """Directory Meta."""
        terms_of_service: str = jose.field('termsOfService', omitempty=True)
        website: str = jose.field('website', omitempty=True)
        caa_identities: List[str] = jose.field('caaIdentities', omitempty=True)
        external_account_required: bool = jose.field('externalAccountRequired', omitempty=True)
        profiles: Dict[str, str] = jose.field('profiles', omitempty=True)

    def __init__(self, jobj: Mapping[str, Any]) -> None:
        self._jobj = dict(jobj)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError as error:
            raise AttributeError(str(error))

    def __getitem__(self, name: str) -> Any:
        try:
            return self._jobj[name]
        except KeyError:
            raise KeyError(f'Directory field "{name}" not found')

    def __contains__(self, name: str) -> bool:
        return name in self._jobj

    def to_partial_json(self) -> Dict[str, Any]:
        return dict(self._jobj)

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'Directory':
        jobj = dict(jobj)
        for name in REQUIRED_DIRECTORY_FIELDS:
            if not isinstance(jobj.get(name), str):
                raise jose.DeserializationError(f'Directory field "{name}" missing or not a URL')
        meta = jobj.pop('meta', {})
        if not isinstance(meta, dict):
            raise jose.DeserializationError('Directory meta is not an object')
        jobj['meta'] = cls.Meta.from_json(meta)
        return cls(jobj)


GenericRegistration = TypeVar('GenericRegistration', bound='Registration')


class Registration(jose.JSONObjectWithFields):
    """Account object, as sent to and returned by the newAccount endpoint.

    :ivar jose.JWK key: Public key.
    :ivar tuple contact: Contact URLs, `tuple` of `str`.
    :ivar Status status:
    :ivar bool terms_of_service_agreed:
    :ivar bool only_return_existing:
    :ivar str orders: URL of the account's orders list.

    """
    # on new-account the server ignores 'key' and populates it based on
    # JWS.signature.combined.jwk
    key: jose.JWK = jose.field('key', omitempty=True, decoder=jose.JWK.from_json)
    contact: Tuple[str, ...] = jose.field('contact', omitempty=True, default=())
    status: Status = jose.field('status', omitempty=True, decoder=Status.from_json,
                                encoder=Status.to_json)
    terms_of_service_agreed: bool = jose.field('termsOfServiceAgreed', omitempty=True)
    only_return_existing: bool = jose.field('onlyReturnExisting', omitempty=True)
    orders: str = jose.field('orders', omitempty=True)

    email_prefix = 'mailto:'

    @classmethod
    def from_data(cls: Type[GenericRegistration], email: Optional[str] = None,
                  **kwargs: Any) -> GenericRegistration:
        """Create a registration with ``email`` as its single mailto contact.

        ``email`` is taken as one address, whatever characters it holds.
        """
        if email is not None:
            kwargs['contact'] = tuple(kwargs.pop('contact', ())) + (cls.email_prefix + email,)
        return cls(**kwargs)

    @property
    def emails(self) -> Tuple[str, ...]:
        """All emails found in the ``contact`` field."""
        return tuple(
            detail[len(self.email_prefix):] for detail in self.contact  # pylint: disable=not-an-iterable
            if detail.startswith(self.email_prefix))


class NewRegistration(Registration):
    """New registration."""
