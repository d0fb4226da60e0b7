"""ACME account bootstrap.

This package implements the account half of the `ACME protocol`_: directory
discovery, account key management, replay-protected JWS requests and account
registration.

.. _`ACME protocol`: https://datatracker.ietf.org/doc/html/rfc8555

"""
