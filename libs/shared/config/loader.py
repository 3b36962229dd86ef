from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from apps.agent.settings import AgentSettings

# --- paths --------------------------------------------------------------------


def _repo_root() -> Path:
    """Heuristic: walk up from this file until we find pyproject.toml."""
    p = Path(__file__).resolve()
    for ancestor in [p, *p.parents]:
        if (ancestor / "pyproject.toml").exists():
            return ancestor
    return Path.cwd()


def _profiles_dir(env: Mapping[str, str]) -> Path:
    # PYRO_CONFIG_DIR points *at* profiles/
    override = env.get("PYRO_CONFIG_DIR")
    if override:
        return Path(override)
    return _repo_root() / "configs" / "profiles"


def _load_profile_table(env: Mapping[str, str], profile: str) -> dict[str, Any]:
    f = _profiles_dir(env) / f"{profile}.toml"
    if not f.exists():
        return {}
    text = f.read_text("utf-8")
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise RuntimeError(f"Failed to parse profile TOML: {f}") from e


# --- env overlay helpers ------------------------------------------------------


def _coerce_env_value(raw: str) -> Any:
    """
    Try JSON first so PYRO_TAGS='{"env":"prod"}' and PYRO_SAMPLE_RATE=99 work,
    then fall back to the original string.
    """
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _collect_env_for(
    fields: Mapping[str, Any], env: Mapping[str, str], prefix: str = "PYRO_"
) -> dict[str, Any]:
    """
    Collect overrides like PYRO_APPLICATION_NAME -> {'application_name': '...'}.
    Case-insensitive after the prefix. `fields` maps field name -> annotation;
    plain `str` fields are taken verbatim, everything else is JSON-decoded.
    """
    out: dict[str, Any] = {}
    upper_to_field = {f.upper(): f for f in fields}
    plen = len(prefix)
    for k, v in env.items():
        if not k.startswith(prefix):
            continue
        key = k[plen:].upper()
        if key in upper_to_field:
            name = upper_to_field[key]
            out[name] = v if fields[name] is str else _coerce_env_value(v)
    return out


# --- public API ---------------------------------------------------------------


def load_agent_settings(
    env: Mapping[str, str] | None = None, profile: str | None = None
) -> AgentSettings:
    """
    Merge defaults (AgentSettings) <- TOML [agent] <- env PYRO_*.
    Env examples: PYRO_SERVER_ADDRESS=http://pyroscope:4040, PYRO_SAMPLE_RATE=99,
    PYRO_TAGS={"env":"prod"}
    """
    env = os.environ if env is None else env
    profile = (profile or env.get("PYRO_PROFILE") or "dev").strip()

    # model_construct skips env parsing; defaults only
    base = AgentSettings.model_construct().model_dump()

    toml_table = _load_profile_table(env, profile)
    toml_agent = toml_table.get("agent", {})
    if isinstance(toml_agent, dict):
        base.update(toml_agent)

    fields = {name: f.annotation for name, f in AgentSettings.model_fields.items()}
    base.update(_collect_env_for(fields, env))

    return AgentSettings.model_validate(base)
