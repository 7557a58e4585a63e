from typing import Any, Dict
from importlib import resources
import os
import yaml

ENV_PREFIX = "RELAY__"


def deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in (b or {}).items():
        if isinstance(out.get(k), dict) and isinstance(v, dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _yaml_load_text(path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def _match_key(sub: Dict[str, Any], part: str) -> str:
    """Existing key of `sub` equal to `part` ignoring case, else `part` lowercased.

    Keeps mixed-case keys such as deny-list tool names ("Bash") addressable
    from upper-case environment variables.
    """
    for existing in sub:
        if isinstance(existing, str) and existing.lower() == part.lower():
            return existing
    return part.lower()


def apply_env_overrides(cfg: Dict[str, Any], environ=None, prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Apply RELAY__A__B=val -> cfg['a']['b']=parsed(val) in place and return cfg.

    Values are parsed as YAML so numbers, booleans, lists and mappings can be
    passed through the environment.
    """
    environ = os.environ if environ is None else environ
    for key, val in environ.items():
        if not key.startswith(prefix):
            continue
        parts = key[len(prefix) :].split("__")
        parts = [p.strip() for p in parts if p.strip()]
        if not parts:
            continue
        sub = cfg
        for p in parts[:-1]:
            name = _match_key(sub, p)
            if not isinstance(sub.get(name), dict):
                sub[name] = {}
            sub = sub[name]
        try:
            parsed = yaml.safe_load(val)
        except yaml.YAMLError:
            parsed = val
        sub[_match_key(sub, parts[-1])] = parsed
    return cfg


def load_settings() -> Dict[str, Any]:
    """
    Load default.yml, overlay dev.yml if present, then apply env overrides using
    RELAY__A__B=val -> cfg['a']['b']=parsed(val)
    """
    pkg_root = resources.files("relay_service.config")
    cfg = _yaml_load_text(pkg_root / "default.yml")

    ignore_dev_config = os.environ.get("RELAY_IGNORE_DEV_CONFIG", "false").lower() in (
        "true",
        "1",
        "yes",
    )

    dev_file = pkg_root / "dev.yml"
    if not ignore_dev_config and dev_file.is_file():
        dev_cfg = _yaml_load_text(dev_file)
        # `_replaces_default: true` makes dev.yml the base instead of an overlay
        if dev_cfg.pop("_replaces_default", False):
            cfg = dev_cfg
        else:
            cfg = deep_merge(cfg, dev_cfg)

    # A YAML file outside the package, for deployments that can't edit the wheel
    extra = os.environ.get("RELAY_CONFIG_FILE")
    if extra:
        from pathlib import Path

        cfg = deep_merge(cfg, _yaml_load_text(Path(extra)))

    return apply_env_overrides(cfg)
