"""Tests for accessmatrix_core.principals: resolvers, chain, caching, expansion."""

from __future__ import annotations

import logging

import pytest

from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import (
    AccessMatrixError,
    DomainOptionalReferenceNotFoundError,
    DomainReferenceNotFoundError,
    PrincipalResolutionError,
    UnsupportedPrincipalError,
)
from accessmatrix_core.interfaces.principal import ResolvedPrincipal
from accessmatrix_core.principals import (
    PrincipalResolverChain,
    cache_key,
    deduplicate,
    expand_principals,
)
from accessmatrix_core.principals.resolvers import (
    CrossStackPrincipalResolver,
    ResourcePrincipalResolver,
)
from accessmatrix_core.resources import types

from conftest import FakeBulk, FakeMeta, FakeResource, FakeServiceAccount


# -- Literal strings ----------------------------------------------------------


@pytest.mark.parametrize(
    "principal, identifier",
    [
        ("user:alice@example.com", "alice@example.com"),
        ("group:ops@example.com", "ops@example.com"),
        ("domain:example.com", "example.com"),
        ("allUsers", "allUsers"),
        ("principal://iam.googleapis.com/x", "//iam.googleapis.com/x"),
    ],
)
def test_string_identifier_is_second_segment(chain, principal, identifier):
    resolved = chain.resolve(principal, 0)
    assert resolved.member == principal
    assert resolved.identifier == identifier


def test_string_with_nothing_after_colon_resolves_to_empty_identifier(chain):
    resolved = chain.resolve("user:", 3)
    assert resolved.member == "user:"
    assert resolved.identifier == ""


# -- Deferred values ------------------------------------------------------------


def test_deferred_identifier_prefers_hint(chain):
    upstream = FakeResource(_logical_name="upstream-sa")
    value = Deferred.of("serviceAccount:x@y", identifier_hint="ci", resources=[upstream])
    resolved = chain.resolve(value, 0)
    assert resolved.identifier == "ci"
    assert resolved.member is value


def test_deferred_identifier_falls_back_to_resource_name(chain):
    upstream = FakeResource(_logical_name="upstream-sa")
    value = Deferred.of("serviceAccount:x@y", resources=[upstream])
    assert chain.resolve(value, 0).identifier == "upstream-sa"


def test_deferred_identifier_placeholder(chain):
    assert chain.resolve(Deferred.of("x"), 0).identifier == "output-principal"


# -- Cross-stack objects --------------------------------------------------------


def test_cross_stack_with_domain(chain):
    resolved = chain.resolve({"domain": "gl", "stack": "org/proj/dev", "name": "svc-a"}, 0)
    assert resolved.identifier == "proj-svc-a-dev-gl"
    assert isinstance(resolved.member, Deferred)
    assert resolved.member.result() == "serviceAccount:svc-a@proj.iam.gserviceaccount.com"


def test_cross_stack_with_domain_non_account_uses_member_field(chain):
    principal = {
        "domain": "gl",
        "stack": "org/proj/dev",
        "name": "svc-a",
        "resource_type": "serviceaccount",
    }
    assert chain.resolve(principal, 0).member.result().startswith("serviceAccount:svc-a@")

    bucket_principal = {**principal, "name": "logs", "resourceType": "bucket"}
    del bucket_principal["resource_type"]
    member = chain.resolve(bucket_principal, 1).member
    with pytest.raises(Exception, match="Property 'member' not found"):
        member.result()


def test_cross_stack_with_domain_missing_entry_fails_on_resolution(chain):
    resolved = chain.resolve({"domain": "gl", "stack": "org/proj/dev", "name": "nope"}, 0)
    with pytest.raises(DomainReferenceNotFoundError, match="'nope'"):
        resolved.member.result()


def test_cross_stack_domain_optional(chain):
    resolved = chain.resolve({"stack": "org/shared/prod", "name": "ci-runner"}, 0)
    assert resolved.identifier == "shared-ci-runner-prod"
    assert resolved.member.result() == "serviceAccount:ci-runner@shared.iam.gserviceaccount.com"


def test_cross_stack_domain_optional_prefixed_value(chain):
    resolved = chain.resolve({"stack": "org/shared/prod", "name": "auditor"}, 0)
    assert resolved.member.result() == "serviceAccount:auditor@shared.iam.gserviceaccount.com"


def test_cross_stack_domain_optional_missing_lists_available(chain):
    resolved = chain.resolve({"stack": "org/shared/prod", "name": "ghost"}, 0)
    with pytest.raises(DomainOptionalReferenceNotFoundError, match="ci-runner"):
        resolved.member.result()


def test_cross_stack_bad_stack_is_wrapped(chain):
    with pytest.raises(PrincipalResolutionError, match="index 3"):
        chain.resolve({"stack": "org/proj", "name": "svc-a", "domain": "gl"}, 3)


def test_cross_stack_non_string_domain_not_claimed():
    resolver = CrossStackPrincipalResolver()
    assert not resolver.can_resolve({"stack": "a/b/c", "name": "x", "domain": 5})
    assert not resolver.can_resolve({"stack": "a/b/c"})
    assert resolver.can_resolve({"stack": "a/b/c", "name": "x"})


def test_cross_stack_without_backend_fails():
    chain = PrincipalResolverChain()
    with pytest.raises(PrincipalResolutionError, match="stack backend"):
        chain.resolve({"stack": "org/proj/dev", "name": "svc-a"}, 0)


# -- Resource handles -------------------------------------------------------------


def test_resource_handle_member_and_meta_name(chain):
    sa = FakeServiceAccount("deployer@proj.iam.gserviceaccount.com", name="deployer-sa")
    resolved = chain.resolve(sa, 0)
    assert resolved.member == "serviceAccount:deployer@proj.iam.gserviceaccount.com"
    assert resolved.identifier == "deployer-sa"


def test_resource_identifier_order():
    resolver = ResourcePrincipalResolver()
    email = "local@proj.iam.gserviceaccount.com"

    tagged = FakeResource(email=email, _logical_name="tagged", meta=FakeMeta("meta"))
    assert resolver.resolve(tagged, 0).identifier == "tagged"

    provider = FakeResource(types.SERVICE_ACCOUNT, email=email, _resource_name="provider")
    assert resolver.resolve(provider, 0).identifier == "provider"

    # Internal naming fields only count on provider instances.
    untyped = FakeResource(email=email, _resource_name="ignored", name="plain")
    assert resolver.resolve(untyped, 0).identifier == "plain"

    assert resolver.resolve({"email": email}, 0).identifier == "local"


def test_derived_deferred_email_keeps_identifier_hint():
    email = Deferred.of("deployer@proj.iam.gserviceaccount.com", identifier_hint="deployer").apply(str.lower)
    resolved = ResourcePrincipalResolver().resolve({"email": email}, 0)
    assert resolved.identifier == "deployer"


def test_resource_handle_with_get_email(chain):
    class Handle:
        def get_email(self):
            return "svc@example.com"

    resolved = chain.resolve(Handle(), 2)
    assert resolved.member == "serviceAccount:svc@example.com"
    assert resolved.identifier == "svc"


def test_resource_handle_deferred_email():
    resolver = ResourcePrincipalResolver()
    email = Deferred.of("late@example.com", identifier_hint="late-sa")
    resolved = resolver.resolve({"email": email}, 4)
    assert resolved.identifier == "late-sa"
    assert resolved.member.result() == "serviceAccount:late@example.com"


def test_resource_handle_empty_email_is_error(chain):
    with pytest.raises(PrincipalResolutionError) as exc_info:
        chain.resolve({"email": ""}, 0)
    assert isinstance(exc_info.value.__cause__, AccessMatrixError)


# -- Unsupported values ---------------------------------------------------------


@pytest.mark.parametrize("principal", [None, 42, {"foo": "bar"}, ["user:a"]])
def test_unsupported_principals(chain, principal):
    with pytest.raises(UnsupportedPrincipalError) as exc_info:
        chain.resolve(principal, 0)
    assert "string" in str(exc_info.value)
    assert chain.is_supported(principal) is False


# -- Caching ------------------------------------------------------------------------


def test_long_common_prefix_does_not_collide(chain):
    prefix = "x" * 60
    a = {"stack": "org/shared/prod", "name": prefix + "a"}
    b = {"stack": "org/shared/prod", "name": prefix + "b"}
    assert cache_key(a, 0) != cache_key(b, 0)
    ra, rb = chain.resolve(a, 0), chain.resolve(b, 0)
    assert ra.identifier != rb.identifier
    assert chain.cache_size == 2


def test_cache_hit_returns_same_resolution(references):
    chain = PrincipalResolverChain(references=references)
    principal = {"stack": "org/shared/prod", "name": "ci-runner"}
    first = chain.resolve(principal, 0)
    second = chain.resolve(dict(principal), 0)
    assert first is second
    assert chain.cache_size == 1


def test_same_principal_different_index(chain):
    r0 = chain.resolve("user:a@example.com", 0)
    r5 = chain.resolve("user:a@example.com", 5)
    assert (r0.member, r0.identifier) == (r5.member, r5.identifier)
    assert chain.cache_size == 2


def test_opaque_objects_keyed_by_identity(chain):
    a = FakeServiceAccount("a@example.com")
    b = FakeServiceAccount("b@example.com")
    assert cache_key(a, 0) != cache_key(b, 0)
    assert cache_key(a, 0) == cache_key(a, 0)


def test_cache_stops_growing_when_full(caplog):
    chain = PrincipalResolverChain(max_cache_size=2)
    with caplog.at_level(logging.WARNING):
        for i in range(4):
            chain.resolve(f"user:u{i}@example.com", 0)
    assert chain.cache_size == 2
    assert sum("cache limit" in r.getMessage() for r in caplog.records) == 1
    # Uncached principals still resolve.
    assert chain.resolve("user:u3@example.com", 0).identifier == "u3@example.com"


def test_clear_cache_and_clear(chain):
    chain.resolve("user:a@example.com", 0)
    chain.clear_cache()
    assert chain.cache_size == 0
    chain.clear()
    assert chain.registered_types() == []
    with pytest.raises(UnsupportedPrincipalError):
        chain.resolve("user:a@example.com", 0)


# -- Registration -----------------------------------------------------------------


def test_default_resolver_order(chain):
    assert chain.registered_types() == ["string", "deferred", "cross-stack", "resource"]


def test_register_custom_resolver():
    class NumberResolver:
        def can_resolve(self, principal):
            return isinstance(principal, int)

        def resolve(self, principal, principal_index):
            return ResolvedPrincipal(member=f"user:{principal}@ids", identifier=str(principal))

    chain = PrincipalResolverChain()
    chain.register("number", NumberResolver())
    assert chain.registered_types()[-1] == "number"
    assert chain.resolve(7, 0).member == "user:7@ids"


def test_register_rejects_non_resolver():
    with pytest.raises(TypeError):
        PrincipalResolverChain().register("bad", object())


# -- Expansion and deduplication ----------------------------------------------------


def test_bulk_expansion_yields_each_account():
    bulk = FakeBulk({f"sa{i}": FakeServiceAccount(f"sa{i}@x") for i in range(3)})
    expanded = expand_principals(["user:a@x", bulk, None])
    assert len(expanded) == 4
    assert expanded[0] == "user:a@x"


def test_single_value_expands_to_list():
    assert expand_principals("user:a@x") == ["user:a@x"]
    assert expand_principals(None) == []


def test_deduplicate_keeps_first_seen_order():
    sa = FakeServiceAccount("a@x")
    values = ["user:b@x", sa, "user:c@x", "user:b@x", sa]
    assert deduplicate(values) == ["user:b@x", sa, "user:c@x"]


def test_resolve_many_uses_consecutive_indices(chain):
    resolved = chain.resolve_many(["user:a@x", "user:a@x", "group:g@x"], start_index=10)
    assert [r.identifier for r in resolved] == ["a@x", "g@x"]
    assert chain.cache_size == 2
