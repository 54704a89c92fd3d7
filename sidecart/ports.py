"""
Interfaces between the cart engine and the widgets around it.

Widgets add to the cart through ``CartMutationPort`` and are told about new
cart state through ``CartChangeListener``; neither side looks the other up by
name.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

if TYPE_CHECKING:
    from sidecart.controller import CartView

# Seconds before a notice dismisses itself
NOTICE_DURATION = 10.0


@dataclass(frozen=True)
class Notice:
    """Transient, dismissible user-facing message."""
    message: str
    button_text: Optional[str] = None
    button_url: Optional[str] = None
    duration: float = NOTICE_DURATION

    @property
    def has_action(self) -> bool:
        """A call-to-action is shown only when both text and url are set."""
        return bool(self.button_text and self.button_url)


class CartMutationPort(ABC):
    """Entry point UI widgets use to put merchandise into the cart."""

    @abstractmethod
    async def add_to_cart(
        self,
        merchandise_id: str,
        quantity: int = 1,
        attributes: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Add ``quantity`` units of a variant to the cart."""


class CartChangeListener(ABC):
    """View layer hook, called after every refresh."""

    @abstractmethod
    async def on_cart_changed(self, view: "CartView") -> None:
        """Render the new cart view."""

    async def on_notice(self, notice: Notice) -> None:
        """Show a transient notice. Ignored by default."""

    async def on_open(self) -> None:
        """Expand the cart panel. Ignored by default."""
