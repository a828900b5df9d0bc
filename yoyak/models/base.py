from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Literal, Protocol

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..cancellation import CancellationToken

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


Conversation = list[Message]


class ChatModel(Protocol):
    """A chat model that answers an ordered list of messages."""

    name: str

    def stream(
        self, messages: Sequence[Message], cancel: CancellationToken | None = None
    ) -> AsyncIterator[str]:  # noqa: D401
        """Stream the reply as text fragments.

        Transport and API failures are raised as
        :class:`~yoyak.errors.ModelInvocationFailed`.
        """

    async def invoke(self, messages: Sequence[Message]) -> str:  # noqa: D401
        """Return the whole reply at once."""
