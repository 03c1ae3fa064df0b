"""Fixtures for AWS client tests.

Provides factory-as-fixture pattern for creating configurable fake boto3 clients
used across AWS client unit tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from infrastructure.clients.aws import AWSClients
from infrastructure.clients.aws import executor as aws_executor
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.configuration.integrations.aws import AwsSettings


class FakePaginator:
    """Fake boto3 paginator that yields provided pages."""

    def __init__(self, pages):
        self._pages = list(pages)
        self.calls: List[Dict[str, Any]] = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        for page in self._pages:
            yield page


class FakeClient:
    """Configurable fake boto3 client for unit tests.

    Supports:
    - Paginated responses via `get_paginator()`
    - API method responses via `__getattr__` lookup; a response that is an
      exception instance is raised
    - Both static and callable response configurations

    Every API call is recorded in ``calls`` as ``(method, kwargs)``.
    """

    def __init__(
        self,
        paginated_pages: Optional[List[Dict[str, Any]]] = None,
        api_responses: Optional[Dict[str, Any]] = None,
        can_paginate: Optional[bool] = None,
    ):
        self._paginated_pages = paginated_pages or []
        self._api_responses = api_responses or {}
        self._can_paginate = (
            bool(self._paginated_pages) if can_paginate is None else can_paginate
        )
        self.calls: List[tuple] = []
        self.paginator: Optional[FakePaginator] = None

    def get_paginator(self, method_name):
        if not self._paginated_pages:
            raise AttributeError("No paginator available")
        self.paginator = FakePaginator(self._paginated_pages)
        return self.paginator

    def can_paginate(self, method_name: str) -> bool:
        return self._can_paginate

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        if name not in self._api_responses and not self._paginated_pages:
            raise AttributeError(name)
        resp = self._api_responses.get(name, {})

        def _call(*_args, **kwargs):
            self.calls.append((name, kwargs))
            if isinstance(resp, Exception):
                raise resp
            if callable(resp):
                return resp(**kwargs)
            return resp

        return _call


@pytest.fixture
def make_fake_client():
    """Factory fixture for creating configurable fake boto3 clients.

    Usage:
        def test_something(make_fake_client, patch_boto3_client):
            client = make_fake_client(api_responses={"publish": {...}})
            calls = patch_boto3_client(client)
    """

    def _factory(
        paginated_pages: Optional[List[Dict[str, Any]]] = None,
        api_responses: Optional[Dict[str, Any]] = None,
        can_paginate: Optional[bool] = None,
    ) -> FakeClient:
        return FakeClient(
            paginated_pages=paginated_pages,
            api_responses=api_responses,
            can_paginate=can_paginate,
        )

    return _factory


@pytest.fixture
def patch_boto3_client(monkeypatch):
    """Route `get_boto3_client` to a fake client.

    Returns a callable taking the fake client and returning the list of
    ``get_boto3_client`` call kwargs (service name included) for assertions.
    """

    def _patch(fake_client):
        calls: List[Dict[str, Any]] = []

        def get_boto3_client(
            service_name, session_config=None, client_config=None, role_arn=None
        ):
            calls.append(
                {
                    "service_name": service_name,
                    "session_config": session_config,
                    "client_config": client_config,
                    "role_arn": role_arn,
                }
            )
            return fake_client

        monkeypatch.setattr(aws_executor, "get_boto3_client", get_boto3_client)
        return calls

    return _patch


@pytest.fixture
def aws_settings():
    return AwsSettings(
        _env_file=None,
        AWS_REGION="ca-central-1",
        AWS_CONNECT_TIMEOUT=2.0,
        AWS_READ_TIMEOUT=4.0,
    )


@pytest.fixture
def session_provider():
    return SessionProvider(region="ca-central-1")


@pytest.fixture
def aws_factory(aws_settings):
    """AWSClients built from test settings.

    Tests that need to customize boto3 behavior should still patch
    `infrastructure.clients.aws.executor.get_boto3_client` (see
    `patch_boto3_client`).
    """
    return AWSClients(aws_settings)
