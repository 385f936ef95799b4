"""Base model for all Cornebuild Pydantic models.

This module provides a base model class that enforces consistent serialization
behavior across all Cornebuild models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class CornebuildBaseModel(BaseModel):
    """Base model class for all Cornebuild Pydantic models.

    Models are immutable once built: a target, a resolved config or a build
    outcome describes one moment of a run and is never edited afterwards.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        use_enum_values=False,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary with consistent serialization parameters.

        Returns:
            Dictionary representation using JSON-compatible serialization
        """
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
