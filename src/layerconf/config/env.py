"""Environment variable layer."""

from __future__ import annotations

import json
import os
from typing import Any, Mapping, Optional

from ..exceptions import InvalidEnvironmentKeyError
from ..logging import get_logger
from .models import ENV_NAMESPACE
from .store import ConfigStore

logger = get_logger(__name__)

DEFAULT_APP_PREFIX = "ADAPT_AUTHORING"


def env_var_to_config_key(name: str, app_prefix: str = DEFAULT_APP_PREFIX) -> str:
    """
    Map an environment variable name onto a config key.

    ``<PREFIX>_<MODULE>__<attr>`` becomes ``<prefix>-<module>.<attr>`` with the
    module part hyphenated and lowercased; anything else becomes
    ``env.<NAME>`` verbatim.

    Raises:
        InvalidEnvironmentKeyError: prefixed name without a ``__<attr>`` part
    """
    if not name.startswith(f"{app_prefix}_"):
        return f"{ENV_NAMESPACE}.{name}"

    module_prefix, separator, attribute = name.partition("__")
    if not separator or not attribute:
        raise InvalidEnvironmentKeyError(name, app_prefix)
    namespace = module_prefix.replace("_", "-").lower()
    return f"{namespace}.{attribute}"


def parse_env_value(raw: str) -> Any:
    """Decode JSON literals ("8080", "true", '{"a": 1}') and keep other text as-is."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def load_environment(
    store: ConfigStore,
    environ: Optional[Mapping[str, str]] = None,
    app_prefix: str = DEFAULT_APP_PREFIX,
) -> int:
    """
    Copy environment variables into ``store``.

    Returns:
        Number of keys written
    """
    source = os.environ if environ is None else environ
    written = 0
    skipped = 0

    for name, raw in source.items():
        try:
            key = env_var_to_config_key(name, app_prefix)
        except InvalidEnvironmentKeyError as e:
            skipped += 1
            logger.warning("Ignoring environment variable", name=name, reason=e.message)
            continue
        if store.set(key, parse_env_value(raw)):
            written += 1

    logger.debug("Loaded environment layer", written=written, skipped=skipped)
    return written
