from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import click
from rich.console import Console

from krystal.cli import output
from krystal.client import KrystalClient
from krystal.config import get_settings
from krystal.errors import KrystalApiError
from krystal.models import PoolSortBy, PositionStatus
from krystal.query import PoolsQuery, PositionsQuery, TransactionQuery
from krystal.utils.formatting import days_ago as days_ago_ts
from krystal.utils.logging import setup_logging

logger = logging.getLogger(__name__)

FORMATS = ["table", "json", "csv", "compact"]
SORT_CHOICES = {
    "apr": PoolSortBy.APR,
    "tvl": PoolSortBy.TVL,
    "volume": PoolSortBy.VOLUME_24H,
    "fee": PoolSortBy.FEE,
}

format_override = click.option(
    "--format", "output_format", type=click.Choice(FORMATS), default=None,
    help="Output format (overrides the global setting)",
)


def build_transaction_query(
    start_time: Optional[int],
    end_time: Optional[int],
    days_ago: Optional[int],
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> Optional[TransactionQuery]:
    """Combine time flags into a query; ``--days-ago`` wins over ``--start-time``."""
    start = days_ago_ts(days_ago) if days_ago is not None else start_time
    query = TransactionQuery(start_time=start, end_time=end_time, limit=limit, offset=offset)
    if query == TransactionQuery():
        return None
    return query


def _run(ctx: click.Context, handler: Callable[[KrystalClient], Awaitable[None]]) -> None:
    obj = ctx.obj
    console: Console = obj["console"]

    async def main() -> None:
        factory = obj.get("client_factory") or (lambda key: KrystalClient.from_env(key))
        async with factory(obj.get("api_key")) as client:
            await handler(client)

    try:
        asyncio.run(main())
    except KrystalApiError as e:
        logger.debug(f"Command failed with {e.kind}: {e}")
        click.echo(f"Error: {e}", err=True)
        click.echo(f"Suggestion: {e.user_message()}", err=True)
        ctx.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        ctx.exit(130)


def _format(ctx: click.Context, override: Optional[str]) -> str:
    return override or ctx.obj["format"]


@click.group()
@click.option("--api-key", "-a", default=None, help="API key (can also be set via KRYSTAL_API_KEY)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--format", "output_format", type=click.Choice(FORMATS), default="table", help="Output format")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.version_option("0.1.0", prog_name="krystal-cli")
@click.pass_context
def cli(ctx, api_key, verbose, output_format, no_color):
    """Query DeFi pools, positions, transactions and chain data through the Krystal Cloud API."""
    ctx.ensure_object(dict)
    setup_logging("DEBUG" if verbose else get_settings().LOG_LEVEL)
    ctx.obj["api_key"] = api_key
    ctx.obj["format"] = output_format
    ctx.obj["console"] = Console(no_color=no_color, highlight=False)


@cli.command()
@click.option("--detailed", "-d", is_flag=True, help="Show detailed chain information")
@click.option("--chain-id", "-i", type=int, default=None, help="Filter by chain ID")
@format_override
@click.pass_context
def chains(ctx, detailed, chain_id, output_format):
    """List supported blockchain networks."""
    fmt = _format(ctx, output_format)
    console = ctx.obj["console"]

    async def handler(client: KrystalClient) -> None:
        result = await client.get_chains()
        if chain_id is not None:
            result = [c for c in result if c.id == chain_id]
        if fmt == "json":
            output.print_json(result)
        elif fmt == "csv":
            output.print_chains_csv(result, detailed)
        else:
            output.print_chains_table(console, result, detailed, compact=fmt == "compact")

    _run(ctx, handler)


@cli.command()
@click.option("--chain-id", "-c", type=int, default=None, help="Chain ID to filter by")
@click.option("--limit", "-l", type=int, default=10, show_default=True, help="Number of results to return")
@click.option("--protocol", "-p", default=None, help="Protocol to filter by")
@click.option("--token", "-t", default=None, help="Token address to filter by")
@click.option("--factory", "-f", default=None, help="Factory address to filter by")
@click.option("--sort-by", "-s", type=click.Choice(list(SORT_CHOICES)), default=None, help="Sort criteria")
@click.option("--min-tvl", type=int, default=None, help="Minimum TVL threshold")
@click.option("--min-volume", type=int, default=None, help="Minimum 24h volume threshold")
@click.option("--with-incentives", is_flag=True, help="Show pools with incentives only")
@click.option("--detailed", "-d", is_flag=True, help="Show detailed pool information")
@click.option("--offset", type=int, default=0, show_default=True, help="Pagination offset")
@format_override
@click.pass_context
def pools(ctx, chain_id, limit, protocol, token, factory, sort_by, min_tvl, min_volume,
          with_incentives, detailed, offset, output_format):
    """Query liquidity pools."""
    fmt = _format(ctx, output_format)
    console = ctx.obj["console"]
    query = PoolsQuery(
        chain_id=chain_id,
        factory_address=factory,
        protocol=protocol,
        token=token,
        sort_by=SORT_CHOICES[sort_by] if sort_by else None,
        min_tvl=min_tvl,
        min_volume_24h=min_volume,
        limit=limit,
        offset=offset,
        with_incentives=True if with_incentives else None,
    )

    async def handler(client: KrystalClient) -> None:
        result = await client.get_pools(query)
        if fmt == "json":
            output.print_json(result)
        elif fmt == "csv":
            output.print_pools_csv(result, detailed)
        else:
            output.print_pools_table(console, result, detailed, compact=fmt == "compact")

    _run(ctx, handler)


@cli.command("pool-detail")
@click.argument("chain_id", type=int)
@click.argument("pool_address")
@click.option("--factory", "-f", default=None, help="Factory address")
@click.option("--with-incentives", "-w", is_flag=True, help="Include incentives information")
@click.pass_context
def pool_detail(ctx, chain_id, pool_address, factory, with_incentives):
    """Get detailed information about a specific pool."""
    fmt = _format(ctx, None)
    console = ctx.obj["console"]

    async def handler(client: KrystalClient) -> None:
        pool = await client.get_pool_detail(chain_id, pool_address, factory, with_incentives)
        if fmt == "json":
            output.print_json(pool)
        else:
            output.print_pool_detail(console, pool)

    _run(ctx, handler)


@cli.command("pool-history")
@click.argument("chain_id", type=int)
@click.argument("pool_address")
@click.option("--factory", "-f", default=None, help="Factory address")
@click.option("--start-time", type=int, default=None, help="Start timestamp (Unix)")
@click.option("--end-time", type=int, default=None, help="End timestamp (Unix)")
@click.option("--days-ago", type=int, default=None, help="Start this many days ago (instead of --start-time)")
@click.pass_context
def pool_history(ctx, chain_id, pool_address, factory, start_time, end_time, days_ago):
    """Get historical data for a specific pool."""
    fmt = _format(ctx, None)
    console = ctx.obj["console"]
    query = build_transaction_query(start_time, end_time, days_ago)

    async def handler(client: KrystalClient) -> None:
        history = await client.get_pool_historical(chain_id, pool_address, factory, query)
        if fmt != "json":
            console.print(f"Historical data for pool {pool_address}:", markup=False)
        output.print_json(history)

    _run(ctx, handler)


@cli.command("pool-transactions")
@click.argument("chain_id", type=int)
@click.argument("pool_address")
@click.option("--factory", "-f", default=None, help="Factory address")
@click.option("--start-time", type=int, default=None, help="Start timestamp (Unix)")
@click.option("--end-time", type=int, default=None, help="End timestamp (Unix)")
@click.option("--days-ago", type=int, default=None, help="Start this many days ago")
@click.option("--limit", "-l", type=int, default=50, show_default=True, help="Maximum number of transactions")
@click.option("--offset", type=int, default=0, show_default=True, help="Pagination offset")
@click.pass_context
def pool_transactions(ctx, chain_id, pool_address, factory, start_time, end_time, days_ago, limit, offset):
    """Get transactions for a specific pool."""
    fmt = _format(ctx, None)
    query = build_transaction_query(start_time, end_time, days_ago, limit, offset)

    async def handler(client: KrystalClient) -> None:
        txs = await client.get_pool_transactions(chain_id, pool_address, factory, query)
        _print_transactions(ctx, fmt, txs)

    _run(ctx, handler)


@cli.command()
@click.argument("wallet")
@click.option("--chain-id", "-c", type=int, default=None, help="Chain ID to filter by")
@click.option("--status", "-s", type=click.Choice(["open", "closed", "all"]), default=None, help="Position status")
@click.option("--protocols", "-p", multiple=True, help="Protocols to filter by (repeatable)")
@click.option("--detailed", "-d", is_flag=True, help="Show detailed position information")
@format_override
@click.pass_context
def positions(ctx, wallet, chain_id, status, protocols, detailed, output_format):
    """Query positions for a wallet."""
    fmt = _format(ctx, output_format)
    console = ctx.obj["console"]
    query = PositionsQuery(
        wallet,
        chain_id=chain_id,
        status=PositionStatus(status.upper()) if status else None,
        protocols=tuple(protocols) or None,
    )

    async def handler(client: KrystalClient) -> None:
        result = await client.get_positions(query)
        if fmt == "json":
            output.print_json(result)
        elif fmt == "csv":
            output.print_positions_csv(result, detailed)
        else:
            output.print_positions_table(console, result, detailed, compact=fmt == "compact")

    _run(ctx, handler)


@cli.command("position-detail")
@click.argument("chain_id", type=int)
@click.argument("position_id")
@click.pass_context
def position_detail(ctx, chain_id, position_id):
    """Get detailed information about a specific position."""
    fmt = _format(ctx, None)
    console = ctx.obj["console"]

    async def handler(client: KrystalClient) -> None:
        position = await client.get_position_detail(chain_id, position_id)
        if fmt == "json":
            output.print_json(position)
        else:
            output.print_position_detail(console, position)

    _run(ctx, handler)


@cli.command("position-transactions")
@click.argument("chain_id", type=int)
@click.argument("token_address")
@click.option("--wallet", "-w", default=None, help="Wallet address")
@click.option("--token-id", default=None, help="Token ID")
@click.option("--start-time", type=int, default=None, help="Start timestamp (Unix)")
@click.option("--end-time", type=int, default=None, help="End timestamp (Unix)")
@click.option("--days-ago", type=int, default=None, help="Start this many days ago")
@click.option("--limit", "-l", type=int, default=50, show_default=True, help="Maximum number of transactions")
@click.pass_context
def position_transactions(ctx, chain_id, token_address, wallet, token_id, start_time, end_time, days_ago, limit):
    """Get transaction history for a specific position."""
    fmt = _format(ctx, None)
    query = build_transaction_query(start_time, end_time, days_ago, limit)

    async def handler(client: KrystalClient) -> None:
        txs = await client.get_position_transactions(chain_id, token_address, wallet, token_id, query)
        _print_transactions(ctx, fmt, txs)

    _run(ctx, handler)


@cli.command()
@click.option("--detailed", "-d", is_flag=True, help="Show the full protocol records")
@format_override
@click.pass_context
def protocols(ctx, detailed, output_format):
    """List all supported protocols."""
    fmt = _format(ctx, output_format)
    console = ctx.obj["console"]

    async def handler(client: KrystalClient) -> None:
        result = await client.get_protocols()
        if fmt == "json":
            output.print_json(result)
        else:
            output.print_protocols(console, result, detailed)

    _run(ctx, handler)


@cli.command("chain-stats")
@click.argument("chain_id", type=int)
@format_override
@click.pass_context
def chain_stats(ctx, chain_id, output_format):
    """Get chain statistics."""
    fmt = _format(ctx, output_format)
    console = ctx.obj["console"]

    async def handler(client: KrystalClient) -> None:
        stats = await client.get_chain_stats(chain_id)
        if fmt != "json":
            console.print(f"Chain {chain_id} Statistics:")
        output.print_json(stats)

    _run(ctx, handler)


def _print_transactions(ctx: click.Context, fmt: str, txs) -> None:
    if fmt == "json":
        output.print_json(txs)
    elif fmt == "csv":
        output.print_transactions_csv(txs)
    else:
        output.print_transactions_table(ctx.obj["console"], txs, compact=fmt == "compact")


def main() -> None:
    cli(obj={})
