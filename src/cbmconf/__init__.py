# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2026/10/17 20:01:52

import logging

from .export import ConfigYamlExporter
from .model import ConfigDocument, ConfigEntry, ConfigSection
from .parser import (
    ConfigClosedError,
    ConfigError,
    ConfigParser,
    ConfigWriteError
)
from .store import ConfigStore, create_config, open_config

__all__ = [
    'ConfigStore', 'open_config', 'create_config',
    'ConfigDocument', 'ConfigSection', 'ConfigEntry',
    'ConfigParser', 'ConfigYamlExporter',
    'ConfigError', 'ConfigWriteError', 'ConfigClosedError'
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
