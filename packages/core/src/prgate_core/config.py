import json
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

from prgate_core.errors import ConfigurationError
from prgate_core.models import BOT_LOGIN, PolicyConfig, PullRequestRef
from prgate_core.policy import MatchMode, compile_patterns

DEFAULT_CONFIG: dict = {
    "title_regex": None,  # a string, a list of strings, or one pattern per line
    "title_regex_mode": "single",  # "single" | "any"
    "on_failed_regex_create_review": True,
    "on_failed_regex_comment": "This pull request title should match `%regex%`.",
    "on_failed_regex_fail_action": False,
    "on_failed_regex_request_changes": False,
    "on_succeeded_regex_dismiss_review_comment": "All good! The pull request title now matches the required pattern.",
    "verify_head_commit_message_as_title": False,
    "commit_regex": None,  # None = reuse the title patterns
    "on_failed_verify_head_commit_message_close": False,
    "on_failed_verify_head_commit_message_comment": "The head commit message should match `%regex%`.",
    "bot_login": BOT_LOGIN,
}

_BOOL_KEYS = frozenset(k for k, v in DEFAULT_CONFIG.items() if isinstance(v, bool))


def load_config(
    config_path: str = ".prgate.yml",
    cli_overrides: Optional[dict] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prgate.yml in the current directory
      3. GitHub Actions inputs (INPUT_* environment variables)
      4. CLI argument overrides
    """
    env = os.environ if environ is None else environ
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    config.update(load_action_inputs(env))

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = env.get("GITHUB_TOKEN")
    return config


def load_action_inputs(environ: Mapping[str, str]) -> dict:
    """Read workflow ``with:`` inputs the way the Actions runner exposes them.

    ``title-regex`` arrives as ``INPUT_TITLE-REGEX``. Booleans are true only
    for the literal "true". Empty inputs are skipped so defaults still apply.
    """
    inputs = {}
    for key in DEFAULT_CONFIG:
        raw = environ.get("INPUT_" + key.upper().replace("_", "-"))
        if raw is None or raw == "":
            continue
        inputs[key] = raw.strip() == "true" if key in _BOOL_KEYS else raw
    return inputs


def load_event_context(environ: Optional[Mapping[str, str]] = None) -> tuple[PullRequestRef, Optional[str]]:
    """Resolve the target pull request and its title from a GitHub Actions run.

    The title is None when the event payload carries none, so the caller
    can fall back to fetching it.
    """
    env = os.environ if environ is None else environ

    repository = env.get("GITHUB_REPOSITORY", "")
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise ConfigurationError("GITHUB_REPOSITORY is not set; pass --repo and --pr explicitly.")

    payload: dict = {}
    event_path = env.get("GITHUB_EVENT_PATH")
    if event_path and Path(event_path).exists():
        try:
            with open(event_path, encoding="utf-8") as f:
                payload = json.load(f) or {}
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Could not parse the event payload at {event_path}: {e}") from e
        if not isinstance(payload, dict):
            raise ConfigurationError(f"The event payload at {event_path} is not a JSON object.")

    pull_request = payload.get("pull_request") or {}
    # Same lookup order as an issue context: pull request, issue, then top-level number.
    number = pull_request.get("number") or (payload.get("issue") or {}).get("number") or payload.get("number")
    if not number:
        raise ConfigurationError("The triggering event has no pull request number; pass --pr explicitly.")

    return PullRequestRef(owner=owner, repo=repo, number=int(number)), pull_request.get("title")


def parse_repo(full_name: str) -> tuple[str, str]:
    owner, _, repo = full_name.partition("/")
    if not owner or not repo or "/" in repo:
        raise ConfigurationError(f"Repository must be in owner/name format, got {full_name!r}.")
    return owner, repo


def _pattern_sources(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        if "\n" not in value:
            return [value] if value else []
        # One pattern per line, as a multi-line workflow input.
        return [line.strip() for line in value.splitlines() if line.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ConfigurationError(f"title_regex must be a string or a list of strings, got {type(value).__name__}.")


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def build_policy(config: dict) -> PolicyConfig:
    """Validate a merged config dict and compile it into a PolicyConfig.

    Raises ConfigurationError for anything that would make the run meaningless.
    """
    sources = _pattern_sources(config.get("title_regex"))
    if not sources:
        raise ConfigurationError("title_regex is required.")

    try:
        mode = MatchMode(config.get("title_regex_mode") or "single")
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown title_regex_mode: {config.get('title_regex_mode')!r}. Choose 'single' or 'any'."
        ) from e
    if mode is MatchMode.SINGLE and len(sources) > 1:
        raise ConfigurationError(
            f"title_regex has {len(sources)} patterns but title_regex_mode is 'single'. Use 'any' for several."
        )

    commit_source = config.get("commit_regex")
    commit_pattern = compile_patterns([commit_source])[0] if commit_source else None

    return PolicyConfig(
        title_patterns=compile_patterns(sources),
        match_any=mode is MatchMode.ANY,
        create_review=_flag(config.get("on_failed_regex_create_review")),
        fail_action=_flag(config.get("on_failed_regex_fail_action")),
        request_changes=_flag(config.get("on_failed_regex_request_changes")),
        failed_comment=config.get("on_failed_regex_comment") or "",
        succeeded_comment=config.get("on_succeeded_regex_dismiss_review_comment") or "",
        verify_commit=_flag(config.get("verify_head_commit_message_as_title")),
        commit_pattern=commit_pattern,
        close_on_commit_fail=_flag(config.get("on_failed_verify_head_commit_message_close")),
        commit_failed_comment=config.get("on_failed_verify_head_commit_message_comment") or "",
        bot_login=config.get("bot_login") or BOT_LOGIN,
    )
