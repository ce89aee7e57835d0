"""Application-layer environment merge policy.

Purpose
-------
Combine the decoded ``config.yml`` mapping with the environment snapshot. The
policy is collision-first: a key present in both sources is fatal, so
environment variables are strictly additive and never override a file entry.

Contents
    - ``find_collision``: first config key that also names an environment
      variable.
    - ``merge_environment``: public entry point returning the merged mapping.

System Role
-----------
Called by :class:`lib_layered_reality.core.Reality` before the config scope is
built. Free of I/O so it can be tested with plain dictionaries.
"""

from __future__ import annotations

from collections.abc import Mapping

from ..domain.errors import EnvConfigCollisionError
from ..observability import log_debug, log_error


def find_collision(config: Mapping[object, object], env: Mapping[str, str]) -> str | None:
    """Return the first lower-cased config key that is also an environment key.

    Examples
    --------
    >>> find_collision({"Path": "/opt"}, {"path": "/usr/bin"})
    'path'
    >>> find_collision({"location": "Moria"}, {"path": "/usr/bin"}) is None
    True
    """

    lowered_env = {key.lower() for key in env}
    for key in config:
        name = str(key).lower()
        if name in lowered_env:
            return name
    return None


def merge_environment(config: Mapping[object, object], env: Mapping[str, str]) -> dict[object, object]:
    """Return *config* extended with every environment variable.

    Parameters
    ----------
    config:
        Decoded config file mapping (any key case).
    env:
        Environment snapshot keyed by lower-cased names.

    Raises
    ------
    EnvConfigCollisionError
        When a config key and an environment key match case-insensitively.

    Examples
    --------
    >>> merge_environment({"location": "Moria"}, {"home": "/home/frodo"})
    {'location': 'Moria', 'home': '/home/frodo'}
    """

    collision = find_collision(config, env)
    if collision is not None:
        log_error("environment_collision", source="env", path=None, key=collision)
        raise EnvConfigCollisionError(
            f"Both the environment and your config file have key {collision}. {EnvConfigCollisionError.HINT}"
        )

    merged: dict[object, object] = dict(config)
    for key, value in env.items():
        merged[key.lower()] = value
    log_debug("environment_merged", source="env", path=None, config_keys=len(config), env_keys=len(env))
    return merged
