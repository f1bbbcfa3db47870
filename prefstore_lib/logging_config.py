from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

from prefstore_lib.config.config import DEFAULT_CONFIG_PATH


def configure_logging(config_path: Optional[Path] = None, level: Optional[str] = None) -> logging.Logger:
    """Configure root logging for prefstore tools.

    An early NOTSET basic config lets the config file be read with logging
    available; the root logger is then reconfigured to the level from
    `level`, or from the config file's ``log_level``, or WARNING.
    """
    # Minimal early config so other imports can emit without error
    logging.basicConfig(level=logging.NOTSET, format='%(asctime)s INFO %(message)s')
    default_log_level = logging.WARNING

    lvl = level
    cfg_path = config_path or DEFAULT_CONFIG_PATH
    if lvl is None and cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
                lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
        except yaml.YAMLError:
            # Config errors are reported by load_config; keep the default here
            lvl = None
    if isinstance(lvl, str):
        numeric = getattr(logging, lvl.upper(), None)
        if isinstance(numeric, int):
            default_log_level = numeric

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=default_log_level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)
    logger.debug("Log level set to %s", logging.getLevelName(default_log_level))
    return logger
