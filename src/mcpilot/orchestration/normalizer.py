"""Action and Parameter Normalizers.

Models spell the same action and parameter many ways ("git.list_repos",
"listRepos", "repoName", "repository"...). These normalizers fold those
spellings onto the closed ActionKind / ParamKey vocabulary before anything
is routed.
"""

import logging
import re
from typing import Any, Mapping

from mcpilot.orchestration.models import ActionKind, ParamKey

logger = logging.getLogger(__name__)


def _fold_key(key: str) -> str:
    """Case-fold and drop separators: 'repo_name' -> 'reponame'."""
    return re.sub(r"[\s_\-]", "", key.strip().lower())


# =============================================================================
# Action vocabulary
# =============================================================================

ACTION_ALIASES: dict[str, ActionKind] = {
    # List repositories
    "listrepos": ActionKind.LIST_REPOS,
    "list_repos": ActionKind.LIST_REPOS,
    "list-repos": ActionKind.LIST_REPOS,
    "list_repositories": ActionKind.LIST_REPOS,
    "git.list_repos": ActionKind.LIST_REPOS,
    "git.listrepos": ActionKind.LIST_REPOS,
    "git_list_repos": ActionKind.LIST_REPOS,
    # Create repository
    "createrepo": ActionKind.CREATE_REPO,
    "create_repo": ActionKind.CREATE_REPO,
    "create-repo": ActionKind.CREATE_REPO,
    "create_repository": ActionKind.CREATE_REPO,
    "git.create_repo": ActionKind.CREATE_REPO,
    "git.createrepo": ActionKind.CREATE_REPO,
    "git_create_repo": ActionKind.CREATE_REPO,
    # Clone repository
    "clonerepo": ActionKind.CLONE_REPO,
    "clone_repo": ActionKind.CLONE_REPO,
    "clone-repo": ActionKind.CLONE_REPO,
    "clone_repository": ActionKind.CLONE_REPO,
    "git.clone_repo": ActionKind.CLONE_REPO,
    "git.clonerepo": ActionKind.CLONE_REPO,
    "git.clone": ActionKind.CLONE_REPO,
    "git_clone": ActionKind.CLONE_REPO,
    # Run container
    "dockerrun": ActionKind.DOCKER_RUN,
    "docker_run": ActionKind.DOCKER_RUN,
    "docker-run": ActionKind.DOCKER_RUN,
    "docker.run": ActionKind.DOCKER_RUN,
    "run_container": ActionKind.DOCKER_RUN,
    "start_container": ActionKind.DOCKER_RUN,
    # Build image
    "dockerbuild": ActionKind.DOCKER_BUILD,
    "docker_build": ActionKind.DOCKER_BUILD,
    "docker-build": ActionKind.DOCKER_BUILD,
    "docker.build": ActionKind.DOCKER_BUILD,
    "build_image": ActionKind.DOCKER_BUILD,
}

# Evaluated in order; the first (verbs, nouns) pair with a hit on both sides wins.
_ACTION_KEYWORDS: list[tuple[tuple[str, ...], tuple[str, ...], ActionKind]] = [
    (("list", "show"), ("repo",), ActionKind.LIST_REPOS),
    (("create", "new", "make"), ("repo",), ActionKind.CREATE_REPO),
    (("clone",), ("repo", "git"), ActionKind.CLONE_REPO),
    (("run", "start"), ("docker", "container"), ActionKind.DOCKER_RUN),
    (("build",), ("docker", "image"), ActionKind.DOCKER_BUILD),
]


def _infer_action_from_keywords(text: str) -> ActionKind:
    """Infer an action from verb and noun keywords in the name."""
    for verbs, nouns, action in _ACTION_KEYWORDS:
        if any(v in text for v in verbs) and any(n in text for n in nouns):
            return action
    return ActionKind.UNKNOWN


class ActionNormalizer:
    """Maps raw action spellings onto ActionKind."""

    def lookup_alias(self, action_name: str) -> ActionKind:
        """Resolve through the alias table only."""
        return ACTION_ALIASES.get(action_name.strip().lower(), ActionKind.UNKNOWN)

    def normalize(self, action_name: str) -> ActionKind:
        """Resolve an action name, alias table first, then keywords.

        Returns ActionKind.UNKNOWN when neither stage matches.
        """
        action = self.lookup_alias(action_name)
        if action is ActionKind.UNKNOWN:
            action = _infer_action_from_keywords(action_name.strip().lower())
        if action is ActionKind.UNKNOWN:
            logger.info(f"Unrecognized action {action_name!r}")
        return action


# =============================================================================
# Parameter vocabulary
# =============================================================================

PARAMETER_ALIASES: dict[ParamKey, tuple[str, ...]] = {
    ParamKey.NAME: (
        "name", "repoName", "repo_name", "repository", "repositoryName",
        "projectName", "project_name", "repo",
    ),
    ParamKey.DESCRIPTION: ("description", "desc", "repoDescription", "about", "summary"),
    ParamKey.IS_PRIVATE: ("isPrivate", "is_private", "private", "privateRepo", "private_repo"),
    ParamKey.REPO_URL: (
        "repoUrl", "repo_url", "url", "repositoryUrl", "cloneUrl", "clone_url", "gitUrl",
    ),
    ParamKey.DIRECTORY: ("directory", "dir", "path", "targetDir", "destination", "folder"),
    ParamKey.OWNER: ("owner", "user", "username", "org", "organization"),
    ParamKey.IMAGE: ("image", "imageName", "image_name", "dockerImage"),
    ParamKey.CONTAINER_NAME: ("containerName", "container_name", "container"),
    ParamKey.TAG: ("tag", "imageTag", "image_tag"),
}

_FOLDED_ALIASES: dict[str, str] = {
    _fold_key(alias): key.value
    for key, aliases in PARAMETER_ALIASES.items()
    for alias in aliases
}

_CANONICAL_KEYS = frozenset(key.value for key in ParamKey)

# Keys the container runtime defines; everything else it receives verbatim.
_CONTAINER_KEYS = frozenset(
    key.value for key in (ParamKey.IMAGE, ParamKey.CONTAINER_NAME, ParamKey.TAG)
)

# Required/optional contract per action; None means backend-defined pass-through.
ACTION_SCHEMAS: dict[ActionKind, dict[str, Any] | None] = {
    ActionKind.LIST_REPOS: {"required": [], "optional": [ParamKey.OWNER]},
    ActionKind.CREATE_REPO: {
        "required": [ParamKey.NAME],
        "optional": [ParamKey.DESCRIPTION, ParamKey.IS_PRIVATE],
    },
    ActionKind.CLONE_REPO: {
        "required": [ParamKey.REPO_URL],
        "optional": [ParamKey.DIRECTORY],
    },
    ActionKind.DOCKER_RUN: None,
    ActionKind.DOCKER_BUILD: None,
    ActionKind.UNKNOWN: None,
}

_TRUE_STRINGS = {"true", "yes", "1", "private"}
_FALSE_STRINGS = {"false", "no", "0", "public"}


def _coerce_bool(value: Any) -> Any:
    """Coerce common truthy/falsy strings; leave anything else untouched."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return value


def _is_blank(value: Any) -> bool:
    """None or a whitespace-only string."""
    return value is None or (isinstance(value, str) and not value.strip())


def requires_name(action: ActionKind) -> bool:
    """Whether the action's contract requires a name parameter."""
    schema = ACTION_SCHEMAS.get(action)
    return bool(schema) and ParamKey.NAME in schema["required"]


def missing_required(action: ActionKind, parameters: Mapping[str, Any]) -> list[str]:
    """List required parameters that are absent or blank."""
    schema = ACTION_SCHEMAS.get(action)
    if not schema:
        return []
    missing = []
    for key in schema["required"]:
        value = parameters.get(key.value)
        if _is_blank(value):
            missing.append(key.value)
    return missing


class ParameterNormalizer:
    """Maps raw parameter keys onto ParamKey for a given action."""

    def normalize(
        self,
        raw_parameters: Mapping[str, Any],
        action: ActionKind,
        original_text: str = "",
        *,
        allow_name_fallback: bool = True,
    ) -> dict[str, Any]:
        """Normalize parameter keys.

        Canonical keys already present are kept as-is; aliases only fill keys
        that are still absent, first match winning. For pass-through actions
        only container key aliases are folded and every other key survives
        verbatim; for the rest unrecognized keys are dropped.

        Args:
            raw_parameters: Parameters as emitted by the model
            action: Resolved action the parameters belong to
            original_text: The user's original request text
            allow_name_fallback: Whether the single-token name fallback may fire

        Returns:
            Mapping keyed by canonical ParamKey values (plus pass-through keys)
        """
        passthrough = ACTION_SCHEMAS.get(action) is None
        result: dict[str, Any] = {}

        for raw_key, value in raw_parameters.items():
            if raw_key in _CANONICAL_KEYS:
                result[raw_key] = value

        for raw_key, value in raw_parameters.items():
            if raw_key in _CANONICAL_KEYS:
                continue
            key = _FOLDED_ALIASES.get(_fold_key(raw_key))
            if passthrough and key not in _CONTAINER_KEYS:
                key = None
            if key is not None:
                if key not in result:
                    result[key] = value
            elif passthrough:
                result[raw_key] = value
            else:
                logger.debug(f"Dropping unrecognized parameter {raw_key!r} for {action.value}")

        private = ParamKey.IS_PRIVATE.value
        if private in result:
            result[private] = _coerce_bool(result[private])

        if allow_name_fallback:
            self._apply_name_fallback(result, action, original_text)

        return result

    def _apply_name_fallback(
        self,
        result: dict[str, Any],
        action: ActionKind,
        original_text: str,
    ) -> None:
        """Use a single-token request ("myrepo") as the name."""
        if not requires_name(action) or not _is_blank(result.get(ParamKey.NAME.value)):
            return
        tokens = original_text.split()
        if len(tokens) == 1:
            logger.info(f"Using single-token request as name for {action.value}")
            result[ParamKey.NAME.value] = tokens[0]
