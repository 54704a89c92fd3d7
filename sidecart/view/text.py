"""Plain-text presentation of a cart view, used by the command line."""
from typing import Callable, Optional

from sidecart.cart.models import CartLine
from sidecart.controller import CartView
from sidecart.ports import CartChangeListener, Notice
from sidecart.services.money import format_money

from .slider import SuggestionSlider

PROGRESS_WIDTH = 20
SUGGESTIONS_HEADER = "Recommended Products"


def _progress_bar(percent) -> str:
    filled = int(percent * PROGRESS_WIDTH // 100)
    return "[" + "#" * filled + "-" * (PROGRESS_WIDTH - filled) + "]"


def render_line(line: CartLine) -> list[str]:
    """Render one cart line; discounted lines show the original price struck out."""
    price = format_money(line.line_total)
    if line.has_discount:
        price += f" (was {format_money(line.original_total)})"

    title = line.product_title
    options = ", ".join(f"{name}: {value}" for name, value in line.visible_options)
    if options:
        title += f" ({options})"

    rows = [f"- {title} x{line.quantity}  {price}"]
    rows.extend(f"    {key}: {value}" for key, value in line.visible_attributes.items())
    rows.append(f"    line: {line.line_id}")
    return rows


def render_cart(view: CartView) -> str:
    """Render the sections of ``view`` in their fixed order."""
    if not view.has_cart and view.message:
        rows = [view.message]
    else:
        rows = []
        for name, value in view.sections():
            if name == "header":
                rows.append(f"{value} ({view.item_count})")
            elif name == "shipping" and value is not None:
                rows.append(f"{_progress_bar(value.percent)} {value.message}")
            elif name == "lines":
                if not value and view.message:
                    rows.append(view.message)
                for line in value:
                    rows.extend(render_line(line))
            elif name == "subtotal" and value is not None:
                rows.append(f"Subtotal  {format_money(value)}")

        if view.checkout_url:
            rows.append(f"Checkout: {view.checkout_url}")

    if view.suggestions:
        rows.append(SUGGESTIONS_HEADER)
        rows.extend(
            f"  * {item.title}  {format_money(item.min_price)}  {item.url}" for item in view.suggestions
        )
    return "\n".join(rows)


def render_notice(notice: Notice) -> str:
    text = f"! {notice.message}"
    if notice.has_action:
        text += f" [{notice.button_text}: {notice.button_url}]"
    return text


class ConsoleCartListener(CartChangeListener):
    """
    Prints every new view and notice.

    Args:
        write: Output function (print by default)
        autoplay: Rotate the suggestion strip in the background
    """

    def __init__(self, write: Callable[[str], None] = print, autoplay: bool = False):
        self.write = write
        self.autoplay = autoplay
        self.is_open = False
        self.slider: Optional[SuggestionSlider] = None

    async def on_cart_changed(self, view: CartView) -> None:
        # A new suggestion list replaces the previous rotation
        if self.slider is not None:
            self.slider.stop()
        self.slider = SuggestionSlider(len(view.suggestions))
        if self.autoplay:
            self.slider.start()
        self.write(render_cart(view))

    async def on_notice(self, notice: Notice) -> None:
        self.write(render_notice(notice))

    async def on_open(self) -> None:
        self.is_open = True
