"""
Resolution of the ``JUDO_*`` settings a client is configured from.

Settings are layered: process environment first, then keys a ``.env`` file
adds without replacing anything, then explicit overrides on top.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional, Tuple

__all__ = ["GatewayEnvironment", "build_environment", "load_env_file"]


def _split_assignment(line: str) -> Optional[Tuple[str, str]]:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, value = (part.strip() for part in line.split("=", 1))
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def _read_dotenv(path: Path) -> Dict[str, str]:
    if not path.is_file():
        return {}
    assignments = (_split_assignment(line) for line in path.read_text(encoding="utf-8").splitlines())
    return dict(item for item in assignments if item is not None)


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Fill gaps in ``environ`` (``os.environ`` by default) from a dotenv file and
    return a snapshot of the result. Keys already present are left alone.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in _read_dotenv(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


@dataclass(frozen=True)
class GatewayEnvironment:
    """Flattened settings ready for :meth:`GatewayConfig.from_mapping`."""

    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> GatewayEnvironment:
    """
    Merge gateway settings without touching the process environment.

    An explicit empty ``base`` means "start from nothing"; ``None`` starts from
    ``os.environ``. ``env_file=None`` skips dotenv loading.
    """
    settings: Dict[str, str] = dict(os.environ if base is None else base)

    if env_file is not None:
        for key, value in _read_dotenv(Path(env_file)).items():
            settings.setdefault(key, value)

    settings.update(overrides or {})
    return GatewayEnvironment(variables=settings)
