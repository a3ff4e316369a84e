"""Tests for configuration loading and policy building."""

import json

import pytest

from prgate_core.config import (
    DEFAULT_CONFIG,
    build_policy,
    load_action_inputs,
    load_config,
    load_event_context,
    parse_repo,
)
from prgate_core.errors import ConfigurationError
from prgate_core.models import BOT_LOGIN


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"), environ={})
    assert config["title_regex"] is None
    assert config["title_regex_mode"] == "single"
    assert config["on_failed_regex_create_review"] is True
    assert config["on_failed_regex_fail_action"] is False
    assert config["bot_login"] == BOT_LOGIN
    assert config["github_token"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("title_regex: '^feat:'\non_failed_regex_fail_action: true\n")
    config = load_config(config_path=str(cfg), environ={})
    assert config["title_regex"] == "^feat:"
    assert config["on_failed_regex_fail_action"] is True


def test_config_file_must_be_mapping(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_config(config_path=str(cfg), environ={})


def test_action_inputs_override_config_file(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("title_regex: '^feat:'\n")
    env = {"INPUT_TITLE-REGEX": "^fix:", "INPUT_ON-FAILED-REGEX-REQUEST-CHANGES": "true"}
    config = load_config(config_path=str(cfg), environ=env)
    assert config["title_regex"] == "^fix:"
    assert config["on_failed_regex_request_changes"] is True


def test_cli_overrides_action_inputs(tmp_path):
    env = {"INPUT_TITLE-REGEX": "^fix:"}
    config = load_config(str(tmp_path / "none.yml"), cli_overrides={"title_regex": ["^feat:"]}, environ=env)
    assert config["title_regex"] == ["^feat:"]


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".gate.yml"
    cfg.write_text("title_regex: '^feat:'\n")
    config = load_config(config_path=str(cfg), cli_overrides={"title_regex": None}, environ={})
    assert config["title_regex"] == "^feat:"


def test_github_token_read_from_environment(tmp_path):
    config = load_config(str(tmp_path / "none.yml"), environ={"GITHUB_TOKEN": "gh-token"})
    assert config["github_token"] == "gh-token"


class TestLoadActionInputs:
    def test_boolean_inputs_only_true_for_literal_true(self):
        inputs = load_action_inputs(
            {"INPUT_ON-FAILED-REGEX-FAIL-ACTION": "True", "INPUT_ON-FAILED-REGEX-CREATE-REVIEW": "true"}
        )
        assert inputs["on_failed_regex_fail_action"] is False
        assert inputs["on_failed_regex_create_review"] is True

    def test_empty_inputs_skipped(self):
        assert load_action_inputs({"INPUT_TITLE-REGEX": ""}) == {}

    def test_unrelated_variables_ignored(self):
        assert load_action_inputs({"INPUT_REPO-TOKEN": "x", "PATH": "/bin"}) == {}

    def test_every_key_has_an_input_name(self):
        env = {"INPUT_" + k.upper().replace("_", "-"): "v" for k in DEFAULT_CONFIG}
        assert set(load_action_inputs(env)) == set(DEFAULT_CONFIG)


class TestLoadEventContext:
    def _event(self, tmp_path, payload):
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload))
        return str(path)

    def test_reads_pull_request_from_payload(self, tmp_path):
        event = self._event(tmp_path, {"pull_request": {"number": 12, "title": "feat: x"}})
        ref, title = load_event_context({"GITHUB_REPOSITORY": "acme/widgets", "GITHUB_EVENT_PATH": event})
        assert (ref.owner, ref.repo, ref.number) == ("acme", "widgets", 12)
        assert title == "feat: x"

    def test_missing_title_is_none(self, tmp_path):
        event = self._event(tmp_path, {"issue": {"number": 3}})
        ref, title = load_event_context({"GITHUB_REPOSITORY": "acme/widgets", "GITHUB_EVENT_PATH": event})
        assert ref.number == 3
        assert title is None

    def test_malformed_payload_raises(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Could not parse") as exc:
            load_event_context({"GITHUB_REPOSITORY": "acme/widgets", "GITHUB_EVENT_PATH": str(path)})
        assert isinstance(exc.value.__cause__, json.JSONDecodeError)

    def test_non_object_payload_raises(self, tmp_path):
        event = self._event(tmp_path, [1, 2])
        with pytest.raises(ConfigurationError, match="not a JSON object"):
            load_event_context({"GITHUB_REPOSITORY": "acme/widgets", "GITHUB_EVENT_PATH": event})

    def test_missing_repository_raises(self):
        with pytest.raises(ConfigurationError, match="GITHUB_REPOSITORY"):
            load_event_context({})

    def test_missing_number_raises(self, tmp_path):
        event = self._event(tmp_path, {"push": {}})
        with pytest.raises(ConfigurationError):
            load_event_context({"GITHUB_REPOSITORY": "acme/widgets", "GITHUB_EVENT_PATH": event})


class TestParseRepo:
    def test_valid(self):
        assert parse_repo("acme/widgets") == ("acme", "widgets")

    @pytest.mark.parametrize("value", ["acme", "/widgets", "acme/", "a/b/c"])
    def test_invalid(self, value):
        with pytest.raises(ConfigurationError):
            parse_repo(value)


class TestBuildPolicy:
    def _config(self, **overrides):
        config = dict(DEFAULT_CONFIG)
        config.update(overrides)
        return config

    def test_single_pattern(self):
        policy = build_policy(self._config(title_regex="^feat:"))
        assert [p.pattern for p in policy.title_patterns] == ["^feat:"]
        assert policy.match_any is False
        assert policy.review_event == "COMMENT"

    def test_multiline_string_split_into_patterns(self):
        policy = build_policy(self._config(title_regex="^feat:\n\n^fix:\n", title_regex_mode="any"))
        assert [p.pattern for p in policy.title_patterns] == ["^feat:", "^fix:"]
        assert policy.match_any is True

    def test_single_line_pattern_kept_verbatim(self):
        policy = build_policy(self._config(title_regex="^fix: "))
        assert policy.title_patterns[0].pattern == "^fix: "

    def test_string_and_list_forms_agree(self):
        from_string = build_policy(self._config(title_regex=" feat "))
        from_list = build_policy(self._config(title_regex=[" feat "]))
        assert from_string.title_patterns == from_list.title_patterns

    def test_policy_does_not_carry_token(self):
        policy = build_policy(self._config(title_regex="^feat:", github_token="secret"))
        assert "secret" not in repr(policy)
        assert not hasattr(policy, "raw")

    def test_missing_pattern_raises(self):
        with pytest.raises(ConfigurationError, match="title_regex is required"):
            build_policy(self._config())

    def test_several_patterns_in_single_mode_raise(self):
        with pytest.raises(ConfigurationError):
            build_policy(self._config(title_regex=["^feat:", "^fix:"]))

    def test_unknown_mode_raises(self):
        with pytest.raises(ConfigurationError) as exc:
            build_policy(self._config(title_regex="^feat:", title_regex_mode="all"))
        assert isinstance(exc.value.__cause__, ValueError)

    def test_invalid_regex_raises(self):
        with pytest.raises(ConfigurationError):
            build_policy(self._config(title_regex="(feat"))

    def test_invalid_commit_regex_raises(self):
        with pytest.raises(ConfigurationError):
            build_policy(self._config(title_regex="^feat:", commit_regex="[oops"))

    def test_bad_pattern_type_raises(self):
        with pytest.raises(ConfigurationError):
            build_policy(self._config(title_regex=42))

    def test_request_changes_event(self):
        policy = build_policy(self._config(title_regex="^feat:", on_failed_regex_request_changes=True))
        assert policy.review_event == "REQUEST_CHANGES"

    def test_string_flags_from_yaml(self):
        policy = build_policy(self._config(title_regex="^feat:", on_failed_regex_create_review="false"))
        assert policy.create_review is False

    def test_commit_patterns_default_to_title_patterns(self):
        policy = build_policy(self._config(title_regex="^feat:"))
        assert policy.commit_patterns == policy.title_patterns

    def test_commit_patterns_use_commit_regex(self):
        policy = build_policy(self._config(title_regex="^feat:", commit_regex="^Merge"))
        assert [p.pattern for p in policy.commit_patterns] == ["^Merge"]
