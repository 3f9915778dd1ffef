"""Tests for accessmatrix_core.matrix.processor: naming, merging, fail-fast."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from accessmatrix_core.config.models import AccessMatrixSettings
from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import (
    ConstructionError,
    DiscoveryError,
    RuleProcessingError,
    UnsupportedPrincipalError,
)
from accessmatrix_core.matrix import PolicyRuleProcessor, UseCase, normalize_role, role_label
from accessmatrix_core.resources import types

from conftest import FakeBulk, FakeCustomRole, FakeResource, bucket, service_account

VIEWER = "roles/storage.objectViewer"


def use_case(rules, principals=None, name="case"):
    return UseCase(name, tuple(rules), principals)


# -- End to end counts ---------------------------------------------------------------


def test_single_rule_single_principal(processor):
    ops = processor.process_use_case(
        use_case([{"resource": bucket("assets"), "role": VIEWER, "principals": ["user:alice@x.com"]}])
    )
    assert len(ops) == 1
    op = ops[0]
    assert op.name == "assets:storage.objectViewer:alice@x.com"
    assert op.resource_type == types.BUCKET
    assert op.args == {"bucket": "assets"}
    assert op.member == "user:alice@x.com"


def test_empty_identifier_falls_back_to_principal_index(processor):
    ops = processor.process_use_case(
        use_case([{"resource": bucket("assets"), "role": VIEWER, "principals": ["user:a@x.com", "user:"]}])
    )
    assert [op.name for op in ops] == [
        "assets:storage.objectViewer:a@x.com",
        "assets:storage.objectViewer:principal-1",
    ]
    assert ops[1].member == "user:"


def test_bulk_resource_expands_per_account(processor):
    bulk = FakeBulk({f"sa-{i}": service_account(f"projects/p/serviceAccounts/sa-{i}") for i in range(3)})
    ops = processor.process_use_case(
        use_case([{"resource": bulk, "role": "roles/iam.serviceAccountUser", "principals": "group:dev@x.com"}])
    )
    assert len(ops) == 3
    assert [op.name for op in ops] == [
        "sa-0:iam.serviceAccountUser:dev@x.com",
        "sa-1:iam.serviceAccountUser:dev@x.com",
        "sa-2:iam.serviceAccountUser:dev@x.com",
    ]
    assert all(op.resource_type == types.SERVICE_ACCOUNT for op in ops)


def test_case_principals_apply_to_every_rule(processor):
    rules = [
        {"resource": bucket("a"), "role": VIEWER},
        {"resource": bucket("b"), "role": VIEWER},
        {"resource": bucket("c"), "role": VIEWER},
    ]
    ops = processor.process_use_case(use_case(rules, ["user:one@x.com", "user:two@x.com"]))
    assert len(ops) == 6


def test_cross_stack_principal_identifier_in_name(processor):
    principal = {"domain": "gl", "stack": "org/proj/dev", "name": "svc-a"}
    ops = processor.process_use_case(
        use_case([{"resource": bucket("assets"), "role": VIEWER, "principals": [principal]}])
    )
    assert ops[0].name == "assets:storage.objectViewer:proj-svc-a-dev-gl"
    assert isinstance(ops[0].member, Deferred)
    assert ops[0].member.result() == "serviceAccount:svc-a@proj.iam.gserviceaccount.com"


def test_iteration_is_principal_major(processor):
    bulk = FakeBulk({"a": service_account("sa-a"), "b": service_account("sa-b")})
    ops = processor.process_use_case(
        use_case([{"resource": bulk, "role": "roles/x", "principals": ["user:p1", "user:p2"]}])
    )
    assert [op.name for op in ops] == ["a:x:p1", "b:x:p1", "a:x:p2", "b:x:p2"]


# -- Principal merging -----------------------------------------------------------------


def test_config_case_rule_principals_are_merged_and_deduplicated(processor):
    ops = processor.process_use_case(
        use_case(
            [{"resource": bucket(), "role": VIEWER, "principals": ["user:b", "user:c"]}],
            principals=["user:a", "user:b"],
        ),
        config_principals=["user:a"],
    )
    assert [op.member for op in ops] == ["user:a", "user:b", "user:c"]


def test_bulk_principals_are_expanded(processor):
    accounts = FakeBulk({
        "ci": {"email": "ci@p.iam.gserviceaccount.com"},
        "ops": {"email": "ops@p.iam.gserviceaccount.com"},
    })
    ops = processor.process_use_case(use_case([{"resource": bucket(), "role": VIEWER}], accounts))
    assert [op.member for op in ops] == [
        "serviceAccount:ci@p.iam.gserviceaccount.com",
        "serviceAccount:ops@p.iam.gserviceaccount.com",
    ]


def test_rule_without_principals_is_skipped(processor, caplog):
    with caplog.at_level(logging.INFO, logger="accessmatrix_core.matrix.processor"):
        ops = processor.process_use_case(use_case([{"resource": bucket(), "role": VIEWER}]))
    assert ops == []
    assert "No principals for rule 0" in caplog.text


# -- Role naming ------------------------------------------------------------------------


@pytest.mark.parametrize(
    "role, label, expected",
    [
        ("roles/viewer", None, "viewer"),
        ("projects/p/roles/deployer", None, "deployer"),
        ("organizations/1/roles/auditor", "audit", "audit"),
        (Deferred.of("roles/viewer"), None, "role-4"),
        (FakeCustomRole("projects/p/roles/x", "Custom X"), None, "Custom X"),
        (FakeCustomRole("projects/p/roles/x"), None, "projects/p/roles/x"),
    ],
)
def test_role_label(role, label, expected):
    assert role_label(role, label, 4) == expected


def test_role_label_custom_role_failure_falls_back():
    class Broken:
        def get_name(self):
            raise RuntimeError("unnamed")

    assert role_label(Broken(), None, 2) == "role-2"


def test_normalize_role():
    assert normalize_role("  roles/viewer ") == "roles/viewer"
    assert normalize_role(FakeCustomRole("projects/p/roles/x")) == "projects/p/roles/x"
    deferred = Deferred.of("roles/x")
    assert normalize_role(deferred) is deferred


def test_label_and_custom_role_in_binding(processor):
    role = FakeCustomRole("projects/p/roles/deployer", "deployer-role")
    ops = processor.process_use_case(
        use_case([
            {"resource": bucket("a"), "role": role, "principals": ["user:u"]},
            {"resource": bucket("a"), "role": "roles/owner", "label": "admin", "principals": ["user:u"]},
        ])
    )
    assert [op.name for op in ops] == ["a:deployer-role:u", "a:admin:u"]
    assert ops[0].role == "projects/p/roles/deployer"


def test_name_truncated_to_limit(chain, resource_registry, builder_registry, caplog):
    settings = AccessMatrixSettings(max_resource_name_length=20)
    processor = PolicyRuleProcessor(chain, resource_registry, builder_registry, settings)
    with caplog.at_level(logging.WARNING):
        ops = processor.process_use_case(
            use_case([{"resource": bucket("a-very-long-bucket-name"), "role": VIEWER, "principals": ["user:u"]}])
        )
    assert ops[0].name == "a-very-long-bucket-n"
    assert "Truncating resource name" in caplog.text


# -- Failures ---------------------------------------------------------------------------


def test_missing_role_fails_with_rule_index(processor):
    with pytest.raises(RuleProcessingError) as exc_info:
        processor.process_use_case(
            use_case([{"resource": bucket(), "role": VIEWER, "principals": ["user:u"]}, {"resource": bucket()}],
                     name="storage")
        )
    err = exc_info.value
    assert (err.case_name, err.rule_index) == ("storage", 1)
    assert "Failed to process access matrix rule 1 in case 'storage'" in str(err)
    assert "'role'" in str(err)


def test_remaining_rules_are_not_attempted(chain, resource_registry, builder_registry):
    builders = MagicMock(wraps=builder_registry)
    processor = PolicyRuleProcessor(chain, resource_registry, builders)
    rules = [
        {"resource": bucket("ok"), "role": VIEWER, "principals": ["user:u"]},
        {"resource": FakeResource(types.BUCKET), "role": VIEWER, "principals": ["user:u"]},
        {"resource": bucket("never"), "role": VIEWER, "principals": ["user:u"]},
    ]
    with pytest.raises(RuleProcessingError) as exc_info:
        processor.process_use_case(use_case(rules))
    assert isinstance(exc_info.value.__cause__, ConstructionError)
    assert builders.create_iam_binding.call_count == 2
    assert [op.name for op in exc_info.value.operations] == ["ok:storage.objectViewer:u"]


def test_unsupported_principal_aborts_rule(processor):
    with pytest.raises(RuleProcessingError) as exc_info:
        processor.process_use_case(use_case([{"resource": bucket(), "role": VIEWER, "principals": [42]}]))
    assert isinstance(exc_info.value.__cause__, UnsupportedPrincipalError)


def test_undiscoverable_resource_aborts_rule(processor):
    with pytest.raises(RuleProcessingError) as exc_info:
        processor.process_use_case(use_case([{"resource": {"name": "x"}, "role": VIEWER, "principals": ["user:u"]}]))
    assert isinstance(exc_info.value.__cause__, DiscoveryError)


# -- Threshold warnings ---------------------------------------------------------------------


def test_threshold_warnings(chain, resource_registry, builder_registry, caplog):
    settings = AccessMatrixSettings(max_rules_per_case=1, max_principals_threshold=1)
    processor = PolicyRuleProcessor(chain, resource_registry, builder_registry, settings)
    rules = [{"resource": bucket(str(i)), "role": VIEWER} for i in range(2)]
    with caplog.at_level(logging.WARNING):
        ops = processor.process_use_case(use_case(rules, ["user:a", "user:b"]), case_name="big")
    assert len(ops) == 4
    assert "Processing 2 rules in case 'big'" in caplog.text
    assert "Rule 0 in case 'big' has 2 principals" in caplog.text
