# -*- encoding: utf-8 -*-
# @File   : export.py
# @Time   : 2026/10/18 00:12:40

"""Dump the pairs of a config file into YAML, and back.

    ```yaml
    null:          # the global section
      GlobalKey: Value
    SectTest:
      EntryTest: VALUE
    ```

Only named entries get exported: comments, free text and blank lines
have no place in a mapping. Feed the result of `read()` to
`ConfigStore.update()` to merge it into a config file.
"""

import warnings

import yaml

from .abstract import FileHandler
from .model import ConfigDocument


class ConfigYamlExporter(FileHandler[ConfigDocument]):
    @staticmethod
    def to_dict(instance: ConfigDocument) -> dict[str | None, dict[str, str]]:
        ret: dict[str | None, dict[str, str]] = {}
        for section in instance:
            # lookups only ever see the first one, samely for keys below.
            if section.name in ret:
                warnings.warn(
                    f'[{section.name}] is declared more than once, '
                    'only the first one is exported.')
                continue
            pairs = ret[section.name] = {}
            for k, v in section.items():
                if k in pairs:
                    warnings.warn(
                        f'[{section.name}] has more than one "{k}", '
                        'only the first one is exported.')
                    continue
                pairs[k] = v
        if not ret[None]:
            del ret[None]
        return ret

    def read(self) -> ConfigDocument:
        """Raises `ValueError` if the document is no mapping of mappings."""
        with open(self._fn, 'r', encoding=self._codec) as fp:
            src = yaml.safe_load(fp) or {}
        if not isinstance(src, dict):
            raise ValueError(
                f'{self._fn}: expected a mapping of sections, '
                f'got {type(src).__name__}.')
        ret = ConfigDocument()
        for decl, pairs in src.items():
            pairs = pairs or {}
            if not isinstance(pairs, dict):
                raise ValueError(
                    f'{self._fn}: section "{decl}" is no mapping, '
                    f'got {type(pairs).__name__}.')
            section = ret.header if decl is None else ret.add_section(
                str(decl))
            for k, v in pairs.items():
                # may there be some pure digits considered as int
                ret.find(section.name, str(k), create=True).value = (
                    '' if v is None else str(v))
        return ret

    def write(self, instance: ConfigDocument) -> None:
        with open(self._fn, 'w', encoding=self._codec) as fp:
            yaml.safe_dump(self.to_dict(instance), fp,
                           allow_unicode=True, sort_keys=False)
