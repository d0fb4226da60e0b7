import pytest


@pytest.fixture(autouse=True)
def clean_requests_environment(monkeypatch):
    """Keep proxy and CA bundle settings of the host out of the requests under test."""
    for name in ('REQUESTS_CA_BUNDLE', 'CURL_CA_BUNDLE', 'HTTP_PROXY', 'HTTPS_PROXY',
                 'ALL_PROXY', 'http_proxy', 'https_proxy', 'all_proxy'):
        monkeypatch.delenv(name, raising=False)
    yield
