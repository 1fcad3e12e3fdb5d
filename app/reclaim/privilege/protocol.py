"""Wire format between the client and the privileged helper.

Messages are single JSON objects terminated by a newline. The helper
exposes exactly one operation, ``removeItems``.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

REMOVE_ITEMS = "removeItems"


class RemoveItemsRequest(BaseModel):
    """Request to remove a list of absolute paths.

    Attributes:
        operation: Always "removeItems".
        paths: Absolute paths to remove.
    """

    model_config = ConfigDict(extra="forbid")

    operation: Literal["removeItems"] = REMOVE_ITEMS
    paths: Annotated[list[str], Field(min_length=1, description="Absolute paths to remove")]

    def encode(self) -> bytes:
        """Serialize as a newline-terminated JSON line."""
        return self.model_dump_json().encode("utf-8") + b"\n"


class RemoveItemsReply(BaseModel):
    """Reply to a removeItems request.

    Attributes:
        success: Whether every path was removed.
        message: Optional detail, set on failure.
    """

    model_config = ConfigDict(extra="forbid")

    success: bool
    message: str | None = None

    def encode(self) -> bytes:
        """Serialize as a newline-terminated JSON line."""
        return self.model_dump_json().encode("utf-8") + b"\n"
