"""ACME utilities."""
import json
import logging
from typing import Type
from typing import TypeVar
from typing import Union

import josepy as jose
import requests

from acme_account import errors

logger = logging.getLogger(__name__)

GenericJSONDeSerializable = TypeVar('GenericJSONDeSerializable', bound=jose.JSONDeSerializable)


def base64url(data: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return jose.b64encode(data).decode('ascii')


def unbase64url(data: Union[str, bytes]) -> bytes:
    """Decode URL-safe base64 without padding.

    :raises .DecodeError: if ``data`` is not valid base64url.

    """
    try:
        return jose.b64decode(data)
    except (TypeError, ValueError) as error:
        raise errors.DecodeError('base64', error)


def response_text(response: requests.Response) -> str:
    """Response body as text, decoded as UTF-8."""
    # ACME bodies are UTF-8 whether or not the charset is declared.
    response.encoding = 'utf-8'
    return response.text


def read_json(response: requests.Response,
              cls: Type[GenericJSONDeSerializable]) -> GenericJSONDeSerializable:
    """Deserialize the JSON body of ``response`` into ``cls``.

    :raises .DecodeError: if the body is not JSON or does not match ``cls``.

    """
    text = response_text(response)
    logger.debug('Decoding %s from:\n%s', cls.__name__, text)
    try:
        jobj = json.loads(text)
    except ValueError as error:
        raise errors.DecodeError('json', error)
    if not isinstance(jobj, dict):
        raise errors.DecodeError('json', f'expected a JSON object, got {type(jobj).__name__}')
    try:
        return cls.from_json(jobj)
    except jose.DeserializationError as error:
        raise errors.DecodeError(cls.__name__, error)


def expect_header(response: requests.Response, name: str) -> str:
    """Value of header ``name``, which must be present.

    :raises .MissingFieldError: if the header is absent.

    """
    value = response.headers.get(name)
    if value is None:
        raise errors.MissingFieldError(name)
    return value
