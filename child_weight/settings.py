"""Single source of truth for config + repo paths (no env overrides).

Policy:
- No fallback/default config values in code.
- If required config keys are missing, terminate with a clear error.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from child_weight.intake import LOGISTIC_KEYS
from child_weight.reference import ReferenceValueSet


REPO_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = REPO_ROOT / 'config.json'

INTAKE_MODES = ('logistic', 'table')


def resolve_path(p: str) -> Path:
    path = Path(p)
    return path if path.is_absolute() else (REPO_ROOT / path)


def load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding='utf-8'))


def _require_path(cfg: dict, keys: list[str]) -> Any:
    cur: Any = cfg
    prefix: list[str] = []
    for k in keys:
        prefix.append(k)
        if not isinstance(cur, dict) or k not in cur:
            raise KeyError(f'Missing required config key: {".".join(prefix)}')
        cur = cur[k]
    return cur


def req_str(cfg: dict, keys: list[str]) -> str:
    v = _require_path(cfg, keys)
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f'Config key {".".join(keys)} must be a non-empty string.')
    return v


def req_float(cfg: dict, keys: list[str]) -> float:
    v = _require_path(cfg, keys)
    if isinstance(v, bool):
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.')
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.') from e


def req_bool(cfg: dict, keys: list[str]) -> bool:
    v = _require_path(cfg, keys)
    if not isinstance(v, bool):
        raise ValueError(f'Config key {".".join(keys)} must be true or false.')
    return v


def read_config(path: Path = DEFAULT_CONFIG_PATH) -> dict:
    cfg = load_json(path)
    validate_config(cfg)
    return cfg


def validate_config(cfg: dict) -> None:
    # Existence/type checks (no defaults).
    days = req_float(cfg, ['simulation', 'days'])
    if days < 0.0:
        raise ValueError('simulation.days must be >= 0.')
    dt = req_float(cfg, ['simulation', 'dt_days'])
    if dt <= 0.0:
        raise ValueError('simulation.dt_days must be > 0.')
    ReferenceValueSet.parse(req_str(cfg, ['simulation', 'reference_values']))
    req_bool(cfg, ['simulation', 'check'])

    req_str(cfg, ['cohort', 'csv'])

    mode = req_str(cfg, ['intake', 'mode']).strip().lower()
    if mode not in INTAKE_MODES:
        raise ValueError(f'intake.mode must be one of {", ".join(INTAKE_MODES)} (got {mode!r}).')
    if mode == 'logistic':
        for k in LOGISTIC_KEYS:
            req_float(cfg, ['intake', 'logistic', k])
    else:
        req_str(cfg, ['intake', 'table_csv'])

    req_str(cfg, ['output_dir'])
    req_bool(cfg, ['plotting', 'enabled'])


def logistic_params(cfg: dict) -> dict:
    return {k: req_float(cfg, ['intake', 'logistic', k]) for k in LOGISTIC_KEYS}
