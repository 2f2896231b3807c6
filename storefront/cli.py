# Overview: Click command groups for session, cart, report and moderation inspection.

# storefront/cli.py
# Commands Legend:
# Prereqs:
# - pip install -e .
# - Point at the API: STOREFRONT_API_URL=http://localhost:5000/api
#
# Session:
# - storefront auth login --email user@example.com
#   Sign in and store the token locally (prompts for the password).
# - storefront auth whoami
#   Validate the stored session against the server and print the user.
# - storefront auth logout
#   Forget the stored session (local only).
#
# Cart (local only, no server calls):
# - storefront cart list
# - storefront cart add p1 --name "Shirt" --price 120000 --quantity 2 --color red --size M
# - storefront cart remove p1 [--color red] [--size M]
#   Without --color/--size every line of the product is removed.
# - storefront cart clear
#
# Admin:
# - storefront reports summary --period monthly
# - storefront reports export csv
# - storefront comments stats [--status pending]

from __future__ import annotations

import asyncio
import functools
import json
import locale
import logging

import click

from . import create_storefront
from .config import Config
from .errors import StorefrontError, ValidationError
from .models import CartItem, PERIODS


logger = logging.getLogger(__name__)


def _run(ctx: click.Context, fn, *, restore_session: bool = False):
    """Build a storefront, run the coroutine function against it, close it."""
    factory = ctx.obj["factory"]

    async def _main():
        storefront = factory()
        try:
            if restore_session:
                await storefront.initialize()
            return await fn(storefront)
        finally:
            await storefront.aclose()

    return asyncio.run(_main())


@click.group()
@click.option("--api-url", default=None, help="REST API base URL (overrides STOREFRONT_API_URL)")
@click.option("--storage-url", default=None, help="Local store URL (overrides STOREFRONT_STORAGE_URL)")
@click.pass_context
def cli(ctx, api_url, storage_url):
    """Storefront client state tools."""
    overrides = {}
    if api_url:
        overrides["API_BASE_URL"] = api_url
    if storage_url:
        overrides["STORAGE_URL"] = storage_url
    config = Config.from_mapping(overrides)

    logging.basicConfig(level=config.LOG_LEVEL)
    try:
        # Comment sorting collates strings by the user's locale
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("Locale collation unavailable, sorting by code point: %s", e)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("factory", functools.partial(create_storefront, config))


# =============================================================================
# auth
# =============================================================================

@cli.group("auth")
def auth_group():
    """Sign in, sign out, inspect the stored session."""


@auth_group.command("login")
@click.option("--email", prompt=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Password")
@click.pass_context
def login_cli(ctx, email, password):
    async def _login(storefront):
        return await storefront.auth.login(email, password)

    try:
        user = _run(ctx, _login)
    except StorefrontError as e:
        click.echo(f"FAIL Login failed: {str(e)}")
        ctx.exit(1)
    click.echo(f"PASS Signed in as {user.full_name or user.email} ({user.email})")


@auth_group.command("whoami")
@click.pass_context
def whoami_cli(ctx):
    async def _whoami(storefront):
        return storefront.auth.user

    user = _run(ctx, _whoami, restore_session=True)
    if user is None:
        click.echo("Not signed in")
        return
    role = "admin" if user.is_admin else "customer"
    click.echo(f"{user.full_name} <{user.email}> [{role}]")


@auth_group.command("logout")
@click.pass_context
def logout_cli(ctx):
    async def _logout(storefront):
        storefront.auth.logout()

    _run(ctx, _logout)
    click.echo("PASS Signed out")


# =============================================================================
# cart
# =============================================================================

@cli.group("cart")
def cart_group():
    """Inspect and edit the locally saved cart."""


@cart_group.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the cart as JSON")
@click.pass_context
def cart_list_cli(ctx, as_json):
    async def _list(storefront):
        return storefront.cart

    cart = _run(ctx, _list)
    if as_json:
        click.echo(json.dumps([item.to_dict() for item in cart.items], ensure_ascii=False, indent=2))
        return

    if not cart.items:
        click.echo("Cart is empty")
        return
    for item in cart.items:
        variant = " / ".join(v for v in (item.color, item.size) if v)
        label = f"{item.name} ({variant})" if variant else item.name
        click.echo(f"  {item.product_id}  {label}  x{item.quantity}  {item.subtotal:g}")
    click.echo(f"Items: {cart.get_cart_items_count()}  Total: {cart.get_cart_total():g}")


@cart_group.command("add")
@click.argument("product_id")
@click.option("--name", required=True, help="Display name")
@click.option("--price", type=float, required=True, help="Unit price")
@click.option("--quantity", type=int, default=1, show_default=True)
@click.option("--image", default=None)
@click.option("--color", default=None)
@click.option("--size", default=None)
@click.pass_context
def cart_add_cli(ctx, product_id, name, price, quantity, image, color, size):
    item = CartItem(
        product_id=product_id,
        name=name,
        price=price,
        quantity=quantity,
        image=image,
        color=color,
        size=size,
    )

    async def _add(storefront):
        storefront.cart.add_to_cart(item)
        return storefront.cart.get_cart_items_count()

    try:
        count = _run(ctx, _add)
    except ValidationError as e:
        click.echo(f"FAIL {str(e)}")
        ctx.exit(1)
    click.echo(f"PASS Added {quantity} x {name}; cart now holds {count} items")


@cart_group.command("remove")
@click.argument("product_id")
@click.option("--color", default=None)
@click.option("--size", default=None)
@click.pass_context
def cart_remove_cli(ctx, product_id, color, size):
    async def _remove(storefront):
        storefront.cart.remove_from_cart(product_id, color, size)

    _run(ctx, _remove)
    click.echo(f"PASS Removed {product_id}")


@cart_group.command("clear")
@click.pass_context
def cart_clear_cli(ctx):
    async def _clear(storefront):
        storefront.cart.clear_cart()

    _run(ctx, _clear)
    click.echo("PASS Cart cleared")


# =============================================================================
# reports
# =============================================================================

@cli.group("reports")
def reports_group():
    """Sales analytics (admin)."""


@reports_group.command("summary")
@click.option("--period", type=click.Choice(PERIODS), default="daily", show_default=True)
@click.pass_context
def reports_summary_cli(ctx, period):
    async def _summary(storefront):
        await storefront.reports.update_filters(period=period)
        return storefront.reports.get_statistics(), storefront.notifier.drain()

    stats, toasts = _run(ctx, _summary)
    if stats is None:
        for toast in toasts:
            click.echo(f"FAIL {toast.message}")
        ctx.exit(1)

    totals, averages, growth = stats["totals"], stats["averages"], stats["growth"]
    click.echo(f"Revenue: {totals['revenue']:g}  Orders: {totals['orders']}  Customers: {totals['customers']}")
    click.echo(f"Avg order value: {averages['order_value']:.2f}  Avg daily revenue: {averages['daily_revenue']:.2f}")
    sign = "+" if growth["is_positive"] else ""
    click.echo(f"Revenue growth: {sign}{growth['revenue']}%")


@reports_group.command("export")
@click.argument("fmt", type=click.Choice(["csv", "pdf"]))
@click.pass_context
def reports_export_cli(ctx, fmt):
    async def _export(storefront):
        if fmt == "pdf":
            path = await storefront.reports.export_to_pdf()
        else:
            path = await storefront.reports.export_to_csv()
        return path, storefront.notifier.drain()

    path, toasts = _run(ctx, _export)
    if path is None:
        for toast in toasts:
            click.echo(f"FAIL {toast.message}")
        ctx.exit(1)
    click.echo(f"PASS Saved {path}")


# =============================================================================
# comments
# =============================================================================

@cli.group("comments")
def comments_group():
    """Comment moderation queue (admin)."""


@comments_group.command("stats")
@click.option("--status", type=click.Choice(["all", "pending", "approved", "rejected", "spam"]), default="all")
@click.pass_context
def comments_stats_cli(ctx, status):
    async def _stats(storefront):
        await storefront.comments.load_comments(status=status)
        return storefront.comments.stats

    try:
        stats = _run(ctx, _stats)
    except StorefrontError as e:
        click.echo(f"FAIL {str(e)}")
        ctx.exit(1)

    click.echo(f"Total: {stats['total']}")
    for key in ("pending", "approved", "rejected", "spam"):
        click.echo(f"  {key}: {stats[key]} ({stats[f'{key}_percentage']}%)")
