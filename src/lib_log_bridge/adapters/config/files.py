"""Structured configuration file providers.

Purpose
-------
Read bridge settings from TOML, JSON, or YAML files. Parsing is kept in small
loader classes so error handling and observability live in one place; the
:class:`FileConfiguration` provider picks a loader by file suffix.

Contents
--------
* :class:`BaseFileLoader` – reads bytes and validates mapping output.
* :class:`TOMLFileLoader` / :class:`JSONFileLoader` / :class:`YAMLFileLoader`.
* :class:`FileConfiguration` – provider over the ``[lib_log_bridge]`` table
  (or the top level when the table is absent).

System Role
-----------
Used by the composition root and the CLI ``--config`` option. Failures raise
:class:`~lib_log_bridge.domain.errors.NotFound` or
:class:`~lib_log_bridge.domain.errors.InvalidFormat` at composition time.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error
from .mapping import MappingConfiguration

SECTION_NAME = "lib_log_bridge"


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing."""

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", path=path, layer="file", size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        lib_log_bridge.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            log_error("config_file_invalid", layer="file", path=path, format="toml", error=str(exc))
            raise InvalidFormat(f"Invalid TOML in {path}: {exc}") from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", layer="file", path=path, format="toml")
        return result


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log_error("config_file_invalid", layer="file", path=path, format="json", error=str(exc))
            raise InvalidFormat(f"Invalid JSON in {path}: {exc}") from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", layer="file", path=path, format="json")
        return result


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with ``yaml.safe_load``; an empty document is ``{}``."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            log_error("config_file_invalid", layer="file", path=path, format="yaml", error=str(exc))
            raise InvalidFormat(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            data = {}
        result = self._ensure_mapping(data, path=path)
        log_debug("config_file_loaded", layer="file", path=path, format="yaml")
        return result


LOADERS: dict[str, type[BaseFileLoader]] = {
    ".toml": TOMLFileLoader,
    ".json": JSONFileLoader,
    ".yaml": YAMLFileLoader,
    ".yml": YAMLFileLoader,
}


class FileConfiguration(MappingConfiguration):
    """Provider backed by one structured configuration file.

    Parameters
    ----------
    path:
        File to read. The suffix selects the parser.
    section:
        Table holding the settings. When the document has no such table its
        top-level keys are used instead.

    Raises
    ------
    NotFound
        The file does not exist.
    InvalidFormat
        Unknown suffix, parse error, or a non-mapping section.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> with TemporaryDirectory() as tmp:
    ...     target = Path(tmp) / "bridge.toml"
    ...     _ = target.write_text('[lib_log_bridge]\\nadapter_type = "stdlib"\\n', encoding="utf-8")
    ...     FileConfiguration(target).get_string("adapter_type")
    'stdlib'
    """

    def __init__(self, path: str | Path, *, section: str = SECTION_NAME) -> None:
        self.path = Path(path)
        loader_cls = LOADERS.get(self.path.suffix.lower())
        if loader_cls is None:
            raise InvalidFormat(f"Unsupported configuration file type: {self.path}")
        document = loader_cls().load(str(self.path))  # type: ignore[attr-defined]
        payload = document.get(section, document)
        if not isinstance(payload, Mapping):
            raise InvalidFormat(f"Section [{section}] in {self.path} is not a table")
        super().__init__(payload)
