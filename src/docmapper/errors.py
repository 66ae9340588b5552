"""Error codes raised while declaring mapped schemas or resolving CLI input.

Coercion and document loading never raise these; they degrade to empty
values instead.
"""

from __future__ import annotations

from enum import StrEnum


class MapperErrorCode(StrEnum):
    """Why a key declaration or mapped-class lookup was rejected."""

    INVALID_KEY_NAME = "mapper_invalid_key_name"
    INVALID_KEY_OPTION = "mapper_invalid_key_option"
    UNKNOWN_TYPE = "mapper_unknown_type"
    INVALID_DOCUMENT = "mapper_invalid_document"


class MapperError(RuntimeError):
    """Schema misconfiguration or unresolvable mapped class.

    ``data`` names the offending key, type or file, e.g.
    ``{"key": "code", "length": "'five'"}``.
    """

    def __init__(
        self,
        code: MapperErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create mapper error.

        Args:
            code: Error code.
            message: Message shown by the CLI.
            data: Key, type or path the error refers to.
        """
        super().__init__(message)
        self.code = code
        self.data = data or {}
