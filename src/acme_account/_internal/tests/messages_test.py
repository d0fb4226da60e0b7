"""Tests for acme_account.messages."""
import copy
import sys
import unittest

import josepy as jose
import pytest

from acme_account._internal.tests import test_util


class ErrorTest(unittest.TestCase):
    """Tests for acme_account.messages.Error."""

    def setUp(self):
        from acme_account.messages import Error
        self.error = Error(typ='urn:ietf:params:acme:error:badNonce', detail='nonce expired',
                           title='title')
        self.error_custom = Error(typ='custom', detail='bar')

    def test_from_json(self):
        from acme_account.messages import Error
        error = Error.from_json(test_util.problem('malformed', 'no'))
        assert error.code == 'malformed'
        assert error.detail == 'no'

    def test_description(self):
        assert 'The client sent an unacceptable anti-replay nonce' == self.error.description
        assert self.error_custom.description is None

    def test_code(self):
        assert 'badNonce' == self.error.code
        assert self.error_custom.code is None

    def test_unknown_acme_code(self):
        from acme_account.messages import Error
        error = Error(typ='urn:ietf:params:acme:error:notAThing')
        assert error.code is None
        assert error.description is None

    def test_str(self):
        assert str(self.error) == (
            'urn:ietf:params:acme:error:badNonce :: The client sent an unacceptable '
            'anti-replay nonce :: nonce expired :: title')

    def test_subproblems(self):
        from acme_account.messages import Error
        jobj = test_util.problem('compound', 'several things')
        jobj['subproblems'] = [test_util.problem('invalidContact', 'bad mailto')]
        error = Error.from_json(jobj)
        assert error.subproblems[0].code == 'invalidContact'
        assert 'bad mailto' in str(error)


class DirectoryTest(unittest.TestCase):
    """Tests for acme_account.messages.Directory."""

    def setUp(self):
        from acme_account.messages import Directory
        self.dir = Directory.from_json(dict(test_util.DIRECTORY))

    def test_getitem(self):
        assert test_util.DIRECTORY['newNonce'] == self.dir['newNonce']

    def test_getitem_fails_with_key_error(self):
        with pytest.raises(KeyError):
            self.dir.__getitem__('foo')

    def test_getattr(self):
        assert test_util.DIRECTORY['newAccount'] == self.dir.newAccount

    def test_getattr_fails_with_attribute_error(self):
        with pytest.raises(AttributeError):
            self.dir.__getattr__('foo')

    def test_getattr_private_name(self):
        with pytest.raises(AttributeError):
            self.dir.__getattr__('_jobj_backup')

    def test_copy(self):
        copied = copy.copy(self.dir)
        assert copied['newAccount'] == test_util.DIRECTORY['newAccount']
        assert copied.newNonce == test_util.DIRECTORY['newNonce']

    def test_contains(self):
        assert 'keyChange' in self.dir
        assert 'renewalInfo' not in self.dir

    def test_unknown_entries_pass_through(self):
        assert test_util.DIRECTORY['keyChange'] == self.dir['keyChange']
        assert self.dir.to_partial_json()['revokeCert'] == test_util.DIRECTORY['revokeCert']

    def test_meta(self):
        assert self.dir.meta.terms_of_service == test_util.BASE_URL + '/terms'
        assert self.dir.meta.website == 'https://example.org'
        assert tuple(self.dir.meta.caa_identities) == ('example.org',)

    def test_meta_optional(self):
        from acme_account.messages import Directory
        jobj = {name: url for name, url in test_util.DIRECTORY.items() if name != 'meta'}
        directory = Directory.from_json(jobj)
        assert directory.meta.terms_of_service is None

    def test_from_json_does_not_mutate_input(self):
        from acme_account.messages import Directory
        jobj = dict(test_util.DIRECTORY)
        Directory.from_json(jobj)
        assert jobj['meta'] == test_util.DIRECTORY['meta']

    def test_required_entries(self):
        from acme_account.messages import Directory
        for name in ('newNonce', 'newAccount', 'newOrder'):
            jobj = dict(test_util.DIRECTORY)
            del jobj[name]
            with pytest.raises(jose.DeserializationError):
                Directory.from_json(jobj)


class RegistrationTest(unittest.TestCase):
    """Tests for acme_account.messages.Registration."""

    def test_from_data(self):
        from acme_account.messages import NewRegistration
        reg = NewRegistration.from_data(email='a@example.com', terms_of_service_agreed=True)
        assert reg.contact == ('mailto:a@example.com',)
        assert reg.emails == ('a@example.com',)
        assert reg.terms_of_service_agreed is True

    def test_from_data_comma_in_email(self):
        from acme_account.messages import NewRegistration
        reg = NewRegistration.from_data(email='"a,b"@example.com')
        assert reg.contact == ('mailto:"a,b"@example.com',)

    def test_from_data_extra_contact(self):
        from acme_account.messages import NewRegistration
        reg = NewRegistration.from_data(email='a@example.com', contact=('tel:+12025551212',))
        assert reg.contact == ('tel:+12025551212', 'mailto:a@example.com')
        assert reg.emails == ('a@example.com',)

    def test_to_json(self):
        from acme_account.messages import NewRegistration
        reg = NewRegistration.from_data(email='foo@example.com', terms_of_service_agreed=True)
        assert reg.to_json() == {
            'contact': ['mailto:foo@example.com'],
            'termsOfServiceAgreed': True,
        }

    def test_from_json_ignores_unknown(self):
        from acme_account.messages import Registration
        from acme_account.messages import Status
        reg = Registration.from_json({
            'status': 'valid',
            'contact': ['mailto:foo@example.com'],
            'orders': 'https://example.org/acct/1/orders',
            'createdAt': '2024-05-01T12:00:00.123456789Z',
            'initialIp': '192.0.2.1',
        })
        assert reg.status == Status.VALID
        assert reg.orders == 'https://example.org/acct/1/orders'

    def test_status_to_json(self):
        from acme_account.messages import Registration
        from acme_account.messages import Status
        reg = Registration(status=Status.DEACTIVATED)
        assert reg.to_json() == {'status': 'deactivated'}
        assert Registration.from_json(reg.to_json()).status is Status.DEACTIVATED

    def test_unknown_status(self):
        from acme_account.messages import Registration
        with pytest.raises(jose.DeserializationError):
            Registration.from_json({'status': 'sleepy'})


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
