# -*- encoding: utf-8 -*-
# @File   : abstract.py
# @Time   : 2026/10/17 20:22:30

from abc import ABCMeta, abstractmethod
from typing import Generic, TypeVar

from .consts import DEFAULT_ENCODING


T = TypeVar('T')


class FileHandler(Generic[T], metaclass=ABCMeta):
    """A text file bound to one codec, read into (and written from) a `T`."""
    def __init__(self, filename: str, encoding: str | None = None) -> None:
        self._fn = filename
        self._codec = encoding or DEFAULT_ENCODING

    @property
    def filename(self) -> str:
        return self._fn

    @property
    def encoding(self) -> str:
        """Codec used for reading, and again for writing."""
        return self._codec

    @abstractmethod
    def read(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def write(self, instance: T) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return f'{self._fn} ({self._codec})'
