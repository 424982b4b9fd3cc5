"""Tests for the migration and form models."""

from webform_migration.models.errors import DecodeError, ErrorLog
from webform_migration.models.form import TargetFieldDefinition
from webform_migration.models.migration import MigrationConfig, MigrationRun, MigrationStatus, TargetKind


class TestErrorLog:

    def test_duplicates_collapse(self):
        log = ErrorLog()
        log.add("Target API unreachable")
        log.add("Target API unreachable")
        assert log.messages == ["Target API unreachable"]

    def test_merge_keeps_first_seen_order(self):
        first, second = ErrorLog(), ErrorLog()
        first.extend(["a", "b"])
        second.extend(["b", "c"])
        first.merge(second)
        assert first.messages == ["a", "b", "c"]

    def test_empty_log_is_falsy(self):
        assert not ErrorLog()
        assert len(ErrorLog()) == 0


def test_decode_error_names_the_component():
    error = DecodeError("Invalid serialized payload", field_key="rating", legacy_id=5)
    assert str(error) == "Component rating (cid 5): Invalid serialized payload"
    assert error.legacy_id == 5


class TestMigrationConfig:

    def test_defaults(self):
        config = MigrationConfig.from_dict({})
        assert config.target == TargetKind.FILE
        assert config.max_submissions is None
        assert config.parallel_workers == 1

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("WEBFORM_TARGET_API_KEY", "from-env")
        config = MigrationConfig.from_dict({"target": "api", "target_url": "https://forms.example.com"})
        assert config.target == TargetKind.API
        assert config.target_api_key == "from-env"

    def test_secrets_are_not_serialized(self):
        config = MigrationConfig(target_api_key="secret", max_submissions=0)
        data = config.to_dict()
        assert "target_api_key" not in data
        assert data["max_submissions"] == 0


def test_run_totals():
    run = MigrationRun()
    first = run.add_step(1, "Contact")
    first.status = MigrationStatus.COMPLETED
    first.submissions_processed = 3
    first.submissions_succeeded = 2
    first.submissions_failed = 1
    run.add_step(2, "Survey").status = MigrationStatus.FAILED

    run.update_totals()

    assert run.total_forms == 2
    assert run.total_forms_failed == 1
    assert run.total_submissions_processed == 3
    assert run.to_dict()["steps"][1]["status"] == "failed"


def test_field_definition_from_dict_restores_children():
    group = TargetFieldDefinition(key="group", label="Group", target_type="fieldset")
    group.children["email"] = TargetFieldDefinition(key="email", label="Email", target_type="email")

    restored = TargetFieldDefinition.from_dict(group.to_dict())

    assert list(restored.children) == ["email"]
    assert restored.to_elements() == group.to_elements()
