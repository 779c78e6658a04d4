import pytest

from actions_lint.globals.lint_config import ConfigError, LintConfig


class TestFromDict:
    def test_defaults(self):
        config = LintConfig.from_dict(None)
        assert config.runner_labels == []
        assert config.config_variables is None
        assert config.disabled_rules == []

    def test_all_sections(self):
        config = LintConfig.from_dict(
            {
                "self-hosted-runner": {"labels": ["linux-gpu", "build-*"]},
                "config-variables": ["DEPLOY_TARGET"],
                "disable": ["shellcheck"],
            }
        )
        assert config.runner_labels == ["linux-gpu", "build-*"]
        assert config.config_variables == ["DEPLOY_TARGET"]
        assert config.is_disabled("shellcheck")
        assert not config.is_disabled("expression")

    def test_empty_variables_list_is_kept(self):
        assert LintConfig.from_dict({"config-variables": []}).config_variables == []

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="invalid configuration at <root>"):
            LintConfig.from_dict({"ignore": ["x"]})

    def test_wrong_type(self):
        with pytest.raises(ConfigError, match="self-hosted-runner.labels"):
            LintConfig.from_dict({"self-hosted-runner": {"labels": "linux"}})


class TestKnownLabel:
    def test_glob_and_case(self):
        config = LintConfig(runner_labels=["Build-*", "linux-gpu"])
        assert config.is_known_label("build-large")
        assert config.is_known_label("LINUX-GPU")
        assert not config.is_known_label("linux-cpu")


class TestLoad:
    def test_load_file(self, tmp_path):
        path = tmp_path / "actions-lint.yaml"
        path.write_text("disable:\n  - runner-label\n", encoding="utf-8")
        assert LintConfig.load(path).disabled_rules == ["runner-label"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="could not read configuration"):
            LintConfig.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "actions-lint.yaml"
        path.write_text("disable: [\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="could not parse configuration"):
            LintConfig.load(path)

    def test_discover(self, tmp_path):
        (tmp_path / ".github").mkdir()
        (tmp_path / ".github" / "actions-lint.yml").write_text(
            "self-hosted-runner:\n  labels: [gpu]\n", encoding="utf-8"
        )
        assert LintConfig.discover(tmp_path).runner_labels == ["gpu"]

    def test_discover_without_file(self, tmp_path):
        assert LintConfig.discover(tmp_path) == LintConfig()
