#!/usr/bin/env python3
"""
Command-line cart client.

Usage:
    sidecart show
    sidecart add gid://shopify/ProductVariant/123 --quantity 2 --attr Engraving=Hi
    sidecart increase gid://shopify/CartLine/abc
    sidecart decrease gid://shopify/CartLine/abc
    sidecart buy-box 8412345678

Configuration comes from SIDECART_* environment variables (or a .env file).
"""
import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Optional

from sidecart.app import Sidecart, build_sidecart
from sidecart.cart.storage import CartIdentityStore, FileIdentityStore, RedisIdentityStore, get_redis
from sidecart.config import SidecartSettings
from sidecart.view.text import ConsoleCartListener

DEFAULT_STORE_PATH = "~/.sidecart.json"


def _positive_int(value: str) -> int:
    quantity = int(value)
    if quantity < 1:
        raise argparse.ArgumentTypeError(f"quantity must be at least 1, got {quantity}")
    return quantity


def _non_negative_int(value: str) -> int:
    quantity = int(value)
    if quantity < 0:
        raise argparse.ArgumentTypeError(f"quantity must not be negative, got {quantity}")
    return quantity


def _parse_attributes(pairs: Optional[list[str]]) -> dict[str, str]:
    attributes = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"attribute must look like KEY=VALUE: {pair!r}")
        attributes[key] = value
    return attributes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sidecart", description="Storefront cart client")
    parser.add_argument("--store", default=DEFAULT_STORE_PATH, help="Identity file (default: %(default)s)")
    parser.add_argument(
        "--redis-namespace",
        default=None,
        help="Keep the cart id in Upstash Redis under this namespace instead of a file",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Show the current cart")

    add = sub.add_parser("add", help="Add a variant to the cart")
    add.add_argument("variant_id")
    add.add_argument("--quantity", type=_positive_int, default=1)
    add.add_argument("--attr", action="append", help="Line attribute KEY=VALUE (repeatable)")

    for name, help_text in (("increase", "Increase a line by one"), ("decrease", "Decrease a line by one")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("line_id")

    set_cmd = sub.add_parser("set", help="Set a line's quantity (0 removes it)")
    set_cmd.add_argument("line_id")
    set_cmd.add_argument("quantity", type=_non_negative_int)

    sub.add_parser("clear-id", help="Forget the stored cart identifier")

    buy_box = sub.add_parser("buy-box", help="Show buy box state for products")
    buy_box.add_argument("product_ids", nargs="+")
    return parser


def _identity_store(args: argparse.Namespace) -> CartIdentityStore:
    if args.redis_namespace:
        redis = get_redis(
            os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        )
        return RedisIdentityStore(redis, args.redis_namespace)
    return FileIdentityStore(Path(args.store))


async def _run_command(sidecart: Sidecart, args: argparse.Namespace) -> int:
    controller = sidecart.controller

    if args.command == "clear-id":
        await sidecart.repository.identity.clear()
        print("Cart identifier cleared.")
        return 0

    if args.command == "buy-box":
        registry = [{"product_id": pid, "container_id": f"cli-{pid}"} for pid in args.product_ids]
        for box in sidecart.buy_boxes(registry):
            await box.load()
            if box.error:
                print(f"{box.entry.product_id}: {box.error}")
                continue
            state = box.button_state()
            print(json.dumps({
                "product": box.product.title,
                "label": state.label,
                "enabled": state.enabled,
                "variant_id": state.variant_id,
            }))
        return 0

    await controller.refresh()
    if args.command == "add":
        await controller.add_to_cart(args.variant_id, args.quantity, args.attributes)
    elif args.command == "increase":
        await controller.change_line_quantity(args.line_id, 1)
    elif args.command == "decrease":
        await controller.change_line_quantity(args.line_id, -1)
    elif args.command == "set":
        await controller.set_line_quantity(args.line_id, args.quantity)

    view = controller.view
    return 1 if view is None or view.is_degraded else 0


async def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "add":
        try:
            args.attributes = _parse_attributes(args.attr)
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))
    settings = SidecartSettings.from_env()
    async with build_sidecart(settings, _identity_store(args), listener=ConsoleCartListener()) as sidecart:
        return await _run_command(sidecart, args)


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
