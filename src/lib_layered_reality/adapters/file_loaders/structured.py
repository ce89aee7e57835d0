"""Structured document decoding.

Purpose
-------
Convert the plaintext of ``config.yml`` and decrypted ``secrets.yml`` into
Python mappings. The adapter is a small wrapper around ``yaml.safe_load`` so
error handling and observability policies live in one place.

Contents
--------
* :class:`YAMLDecoder` – decodes bytes or text into a mapping, treating an empty
  document as ``{}``.

System Role
-----------
Invoked by :class:`lib_layered_reality.core.Reality` after the permission
check (config) or after decryption (secrets). Reading is left to the caller so
this adapter never touches the filesystem.
"""

from __future__ import annotations

from typing import Mapping

import yaml

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error


class YAMLDecoder:
    """Decode YAML documents into mappings."""

    def decode(self, payload: bytes | str, *, source: str) -> Mapping[str, object]:
        """Return the mapping encoded in *payload*.

        Parameters
        ----------
        payload:
            Document body as bytes or text.
        source:
            Originating path, used for error messages and logging only.

        Raises
        ------
        InvalidFormat
            When the document is not valid YAML or its top level is not a
            mapping.

        Examples
        --------
        >>> YAMLDecoder().decode(b"location: Moria", source="config.yml")
        {'location': 'Moria'}
        >>> YAMLDecoder().decode("", source="secrets.yml")
        {}
        """

        try:
            data = yaml.safe_load(payload)
        except yaml.YAMLError as exc:
            log_error("document_invalid", source="yaml", path=source, error=str(exc))
            raise InvalidFormat(f"Invalid YAML in {source}: {exc}") from exc
        if data is None:
            data = {}
        result = self._ensure_mapping(data, source=source)
        log_debug("document_decoded", source="yaml", path=source, keys=len(result))
        return result

    @staticmethod
    def _ensure_mapping(data: object, *, source: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> YAMLDecoder._ensure_mapping({"key": 1}, source="demo")
        {'key': 1}
        >>> YAMLDecoder._ensure_mapping(42, source="demo")
        Traceback (most recent call last):
        ...
        lib_layered_reality.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {source} did not produce a mapping")
        return data  # type: ignore[return-value]
