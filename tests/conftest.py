"""Shared test fixtures for AccessMatrix."""

import logging

import pytest

from accessmatrix_core.builders import IamBuilderRegistry
from accessmatrix_core.config.models import AccessMatrixConfig, AccessMatrixSettings
from accessmatrix_core.matrix import PolicyRuleProcessor
from accessmatrix_core.principals import PrincipalResolverChain
from accessmatrix_core.reference import InMemoryStackBackend, StackHandleCache, StackReferences
from accessmatrix_core.reference.cache import default_stack_cache
from accessmatrix_core.resources import ResourceTypeRegistry
from accessmatrix_core.resources import types


# -- Fake component library -------------------------------------------------


class FakeResource:
    """Provider resource stand-in: a type token plus arbitrary fields."""

    def __init__(self, type_token=None, **fields):
        if type_token is not None:
            self.type_token = type_token
        for key, value in fields.items():
            setattr(self, key, value)

    def __repr__(self):
        return f"FakeResource({vars(self)!r})"


class FakeMeta:
    def __init__(self, name):
        self._meta_name = name

    def get_name(self):
        return self._meta_name


class FakeComponent:
    """Component wrapping one provider resource behind a getter (``get_bucket`` etc.)."""

    def __init__(self, getter, resource, name=None):
        self._resource = resource
        setattr(self, getter, lambda: self._resource)
        if name is not None:
            self.meta = FakeMeta(name)


class FakeBulk:
    """Bulk container exposing ``get_accounts()``."""

    def __init__(self, accounts):
        self._accounts = accounts

    def get_accounts(self):
        return dict(self._accounts)


class FakeServiceAccount:
    """Resource handle principal with an email and a component name."""

    def __init__(self, email, name=None):
        self.email = email
        if name is not None:
            self.meta = FakeMeta(name)


class FakeCustomRole:
    def __init__(self, role_id, display_name=None):
        self._role_id = role_id
        if display_name is not None:
            self.meta = FakeMeta(display_name)

    def get_name(self):
        return self._role_id


def bucket(name="assets", **extra):
    return FakeResource(types.BUCKET, name=name, **extra)


def service_account(name="deployer", **extra):
    return FakeResource(types.SERVICE_ACCOUNT, name=name, **extra)


# -- Fixtures ---------------------------------------------------------------


STACK_OUTPUTS = {
    "org/proj/dev": {
        "resources": {
            "gl": {
                "gcp:serviceaccount:Account": {
                    "svc-a": {
                        "id": "projects/proj/serviceAccounts/svc-a",
                        "name": "svc-a",
                        "email": "svc-a@proj.iam.gserviceaccount.com",
                        "member": "serviceAccount:svc-a@proj.iam.gserviceaccount.com",
                        "projectId": "proj",
                    },
                },
                "gcp:storage:Bucket": {
                    "logs": {"id": "logs-bucket", "name": "logs-bucket"},
                },
            },
        },
    },
    "org/shared/prod": {
        "ci-runner": "ci-runner@shared.iam.gserviceaccount.com",
        "auditor": "serviceAccount:auditor@shared.iam.gserviceaccount.com",
        "broken": {"nested": True},
    },
}


@pytest.fixture(autouse=True)
def _isolate_process_state():
    """Reset the process-wide stack cache and root logger between tests."""
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    default_stack_cache.clear()
    yield
    default_stack_cache.clear()
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)


@pytest.fixture
def backend():
    return InMemoryStackBackend(STACK_OUTPUTS)


@pytest.fixture
def stack_cache():
    return StackHandleCache(capacity=10)


@pytest.fixture
def references(backend, stack_cache):
    return StackReferences(backend, default_output_key="resources", cache=stack_cache)


@pytest.fixture
def chain(references):
    return PrincipalResolverChain(references=references)


@pytest.fixture
def resource_registry():
    return ResourceTypeRegistry.with_defaults()


@pytest.fixture
def builder_registry():
    return IamBuilderRegistry.with_defaults()


@pytest.fixture
def settings():
    return AccessMatrixSettings()


@pytest.fixture
def processor(chain, resource_registry, builder_registry, settings):
    return PolicyRuleProcessor(chain, resource_registry, builder_registry, settings)


@pytest.fixture
def config():
    return AccessMatrixConfig(reference={"default_output_key": "resources"})
