"""Renderers for the CLI: pretty JSON, CSV, rich tables and one-line compact form."""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

import click
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from krystal.models import ChainInfo, Pool, PoolStats, Position, TokenWithValue, Transaction
from krystal.utils.formatting import (
    format_address_default,
    format_percentage,
    format_timestamp,
    format_usd,
    format_usd_compact,
)


def escape_csv(value: str) -> str:
    """Quote a CSV field, doubling inner quotes, only when it needs it."""
    if "," in value or '"' in value or "\n" in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def truncate_string(value: str, max_len: int) -> str:
    if len(value) <= max_len:
        return value
    return value[: max(0, max_len - 3)] + "..."


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, mode="json")
    if isinstance(data, (list, tuple)):
        return [_jsonable(item) for item in data]
    return data


def print_json(data: Any) -> None:
    click.echo(json.dumps(_jsonable(data), indent=2))


def _csv_rows(header: str, rows: Iterable[Sequence[Any]]) -> None:
    click.echo(header)
    for row in rows:
        click.echo(",".join(escape_csv(v) if isinstance(v, str) else str(v) for v in row))


def _num(value: float) -> str:
    # Fixed-point, shortest digits that round-trip, integers without a trailing .0
    if float(value).is_integer():
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")


# Chains

def print_chains_table(console: Console, chains: List[ChainInfo], detailed: bool = False, compact: bool = False) -> None:
    if not chains:
        console.print("No chains found")
        return
    console.print(f"Found {len(chains)} supported chains")
    if compact:
        for chain in chains:
            click.echo(f"{chain.id}: {chain.name}")
    elif detailed:
        for i, chain in enumerate(chains, 1):
            console.print(f"\n{i}. {chain.name} (ID: {chain.id})", markup=False)
            if chain.logo:
                console.print(f"   Logo: {chain.logo}", markup=False)
            if chain.explorer:
                console.print(f"   Explorer: {chain.explorer}", markup=False)
            if chain.additional_fields:
                console.print(f"   Additional fields: {chain.additional_fields}", markup=False)
    else:
        table = Table()
        table.add_column("ID", style="dim", width=4)
        table.add_column("Name", style="cyan", max_width=20)
        table.add_column("Explorer", style="white", max_width=50)
        for chain in chains:
            table.add_row(str(chain.id), truncate_string(chain.name, 20), truncate_string(chain.explorer or "N/A", 50))
        console.print(table)


def print_chains_csv(chains: List[ChainInfo], detailed: bool = False) -> None:
    if detailed:
        _csv_rows("id,name,logo,explorer", ((c.id, c.name, c.logo or "", c.explorer or "") for c in chains))
    else:
        _csv_rows("id,name", ((c.id, c.name) for c in chains))


# Pools

def _protocol_name(pool: Pool) -> str:
    return pool.protocol.name if pool.protocol else "Unknown"


def print_pools_table(console: Console, pools: List[Pool], detailed: bool = False, compact: bool = False) -> None:
    if not pools:
        console.print("No pools found")
        return
    console.print(f"Found {len(pools)} pools")
    if compact:
        for pool in pools:
            click.echo(f"{pool.token_pair()} ({_protocol_name(pool)}) - TVL: {format_usd(pool.tvl)}")
    elif detailed:
        for i, pool in enumerate(pools, 1):
            _print_pool_summary(console, i, pool)
    else:
        table = Table()
        table.add_column("#", style="dim", width=4)
        table.add_column("Pool", style="cyan", max_width=20)
        table.add_column("Protocol", style="magenta", max_width=15)
        table.add_column("TVL", style="green", justify="right")
        table.add_column("24h Volume", style="green", justify="right")
        table.add_column("24h APR", style="yellow", justify="right")
        for i, pool in enumerate(pools, 1):
            table.add_row(
                str(i),
                truncate_string(pool.token_pair(), 20),
                truncate_string(pool.protocol.key if pool.protocol else "Unknown", 15),
                format_usd_compact(pool.tvl),
                format_usd_compact(pool.volume_24h()),
                f"{pool.apr() or 0.0:.1f}%",
            )
        console.print(table)


def print_pools_csv(pools: List[Pool], detailed: bool = False) -> None:
    if detailed:
        _csv_rows(
            "index,chain_id,chain_name,pool_address,protocol,token0_symbol,token1_symbol,fee_tier,tvl,pool_price,volume_24h,apr_24h",
            (
                (
                    i,
                    p.chain.id if p.chain else 0,
                    p.chain.name if p.chain else "Unknown",
                    p.address,
                    _protocol_name(p),
                    p.token0.symbol if p.token0 else "?",
                    p.token1.symbol if p.token1 else "?",
                    p.fee_tier,
                    _num(p.tvl),
                    _num(p.pool_price),
                    _num(p.volume_24h()),
                    _num(p.apr() or 0.0),
                )
                for i, p in enumerate(pools, 1)
            ),
        )
    else:
        _csv_rows(
            "index,token_pair,protocol,tvl,volume_24h,apr_24h",
            (
                (i, p.token_pair(), _protocol_name(p), _num(p.tvl), _num(p.volume_24h()), _num(p.apr() or 0.0))
                for i, p in enumerate(pools, 1)
            ),
        )


def _print_stats(console: Console, label: str, stats: Optional[PoolStats]) -> None:
    if stats is None:
        return
    console.print(f"\n{label} Statistics:")
    console.print(f"  Volume: {format_usd(stats.volume)}")
    console.print(f"  Fees: {format_usd(stats.fee)}")
    console.print(f"  APR: {format_percentage(stats.apr)}")


def print_pool_detail(console: Console, pool: Pool) -> None:
    console.print(f"\n[bold]{pool.display_name()}[/bold]")
    console.print(f"Address: {pool.address}", markup=False)
    if pool.chain:
        console.print(f"Chain: {pool.chain.name} (ID: {pool.chain.id})", markup=False)
        if pool.chain.explorer:
            console.print(f"Explorer: {pool.chain.explorer}", markup=False)
    if pool.protocol:
        console.print(f"Protocol: {pool.protocol.name} ({pool.protocol.key})", markup=False)
        console.print(f"Factory: {pool.protocol.factory_address}", markup=False)
    console.print(f"Fee Tier: {pool.fee_tier}bps")
    console.print(f"TVL: {format_usd(pool.tvl)}")
    console.print(f"Pool Price: {pool.pool_price:.8f}")
    for name, token in (("Token0", pool.token0), ("Token1", pool.token1)):
        if token:
            console.print(f"{name}: {token.symbol} ({token.name}) - {token.address}", markup=False)

    _print_stats(console, "1h", pool.stats1h)
    _print_stats(console, "24h", pool.stats24h)
    _print_stats(console, "7d", pool.stats7d)
    _print_stats(console, "30d", pool.stats30d)

    if pool.incentives:
        console.print("\nIncentives:")
        for incentive in pool.incentives:
            console.print(f"  Type: {incentive.incentive_type}", markup=False)
            console.print(f"  Token: {incentive.token.symbol} ({incentive.token.name})", markup=False)
            console.print(f"  Daily Reward: {format_usd(incentive.daily_reward_usd)}")
            console.print(f"  24h APR: {format_percentage(incentive.apr24h)}")
            console.print()


def _print_pool_summary(console: Console, index: int, pool: Pool) -> None:
    console.print(f"\n{index}. {pool.display_name()}", markup=False)
    console.print(f"   Address: {format_address_default(pool.address)}")
    if pool.chain:
        console.print(f"   Chain: {pool.chain.name} (ID: {pool.chain.id})", markup=False)
    if pool.protocol:
        console.print(f"   Protocol: {pool.protocol.name} ({pool.protocol.key})", markup=False)
    console.print(f"   Fee Tier: {pool.fee_tier}bps")
    console.print(f"   TVL: {format_usd(pool.tvl)}")
    console.print(f"   Pool Price: {pool.pool_price:.8f}")
    if pool.stats24h:
        console.print(f"   24h Volume: {format_usd(pool.stats24h.volume)}")
        console.print(f"   24h Fees: {format_usd(pool.stats24h.fee)}")
        console.print(f"   24h APR: {format_percentage(pool.stats24h.apr)}")
    if pool.stats7d:
        console.print(f"   7d APR: {format_percentage(pool.stats7d.apr)}")


# Positions

def _position_protocol(position: Position) -> str:
    if position.pool and position.pool.protocol:
        return position.pool.protocol.name
    return "Unknown"


def print_positions_table(
    console: Console, positions: List[Position], detailed: bool = False, compact: bool = False
) -> None:
    if not positions:
        console.print("No positions found")
        return
    console.print(f"Found {len(positions)} positions")
    if compact:
        for pos in positions:
            click.echo(f"{pos.id} - Status: {pos.status}, Value: {format_usd(pos.current_position_value)}")
    elif detailed:
        for i, pos in enumerate(positions, 1):
            console.print(f"\n{i}. Position {pos.id}", markup=False)
            console.print(f"   Owner: {format_address_default(pos.owner_address)}")
            console.print(f"   Status: {pos.status}", markup=False)
            console.print(f"   Value: {format_usd(pos.current_position_value)}")
            console.print(f"   Price Range: {pos.min_price:.6f} - {pos.max_price:.6f}")
            if pos.chain:
                console.print(f"   Chain: {pos.chain.name} (ID: {pos.chain.id})", markup=False)
            if pos.pool and pos.pool.protocol:
                console.print(f"   Protocol: {pos.pool.protocol.name}", markup=False)
    else:
        table = Table()
        table.add_column("#", style="dim", width=4)
        table.add_column("Position ID", style="cyan", max_width=20)
        table.add_column("Status", max_width=10)
        table.add_column("Value", style="green", justify="right")
        table.add_column("Chain", max_width=10)
        table.add_column("Protocol", style="magenta", max_width=12)
        for i, pos in enumerate(positions, 1):
            table.add_row(
                str(i),
                truncate_string(pos.id, 20),
                pos.status,
                format_usd(pos.current_position_value),
                truncate_string(pos.chain.name if pos.chain else "Unknown", 10),
                truncate_string(_position_protocol(pos), 12),
            )
        console.print(table)


def print_positions_csv(positions: List[Position], detailed: bool = False) -> None:
    if detailed:
        _csv_rows(
            "index,position_id,chain_id,chain_name,status,current_value,min_price,max_price,liquidity",
            (
                (
                    i,
                    p.id,
                    p.chain.id if p.chain else 0,
                    p.chain.name if p.chain else "Unknown",
                    p.status,
                    _num(p.current_position_value),
                    _num(p.min_price),
                    _num(p.max_price),
                    p.liquidity,
                )
                for i, p in enumerate(positions, 1)
            ),
        )
    else:
        _csv_rows(
            "index,position_id,status,current_value",
            ((i, p.id, p.status, _num(p.current_position_value)) for i, p in enumerate(positions, 1)),
        )


def _print_amounts(console: Console, title: str, amounts: Optional[List[TokenWithValue]]) -> None:
    if not amounts:
        return
    console.print(f"\n{title}:")
    for amount in amounts:
        console.print(f"  {amount.token.symbol}: {amount.balance} ({format_usd(amount.value)})", markup=False)


def print_position_detail(console: Console, position: Position) -> None:
    console.print(f"\n[bold]Position: {position.id}[/bold]")
    console.print(f"Owner: {format_address_default(position.owner_address)}")
    console.print(f"Token Address: {position.token_address}", markup=False)
    console.print(f"Token ID: {position.token_id}", markup=False)
    console.print(f"Status: {position.status}", markup=False)
    console.print(f"Liquidity: {position.liquidity}", markup=False)
    console.print(f"Price Range: {position.min_price:.6f} - {position.max_price:.6f}")
    console.print(f"Current Value: {format_usd(position.current_position_value)}")
    if position.chain:
        console.print(f"Chain: {position.chain.name} (ID: {position.chain.id})", markup=False)
    if position.pool:
        console.print(f"Pool: {position.pool.pool_address}", markup=False)
        if position.pool.protocol:
            console.print(f"Protocol: {position.pool.protocol.name} ({position.pool.protocol.key})", markup=False)

    _print_amounts(console, "Current Token Amounts", position.current_amounts)
    _print_amounts(console, "Provided Token Amounts", position.provided_amounts)

    perf = position.performance
    if perf:
        console.print("\nPerformance:")
        console.print(f"  Total Deposit Value: {format_usd(perf.total_deposit_value)}")
        console.print(f"  Total Withdraw Value: {format_usd(perf.total_withdraw_value)}")
        console.print(f"  P&L: {format_usd(perf.pnl)}")
        console.print(f"  ROI: {format_percentage(perf.return_on_investment)}")
        console.print(f"  Impermanent Loss: {format_usd(perf.impermanent_loss)}")
        if perf.compare_to_hold is not None:
            console.print(f"  Compare to Hold: {format_percentage(perf.compare_to_hold)}")
        if perf.apr:
            console.print(f"  Total APR: {format_percentage(perf.apr.total_apr)}")
            console.print(f"  Fee APR: {format_percentage(perf.apr.fee_apr)}")
            console.print(f"  Farm APR: {format_percentage(perf.apr.farm_apr)}")


# Transactions

def print_transactions_table(console: Console, transactions: List[Transaction], compact: bool = False) -> None:
    if not transactions:
        console.print("No transactions found")
        return
    console.print(f"Found {len(transactions)} transactions")
    if compact:
        for tx in transactions:
            click.echo(f"{tx.hash[:10]}: {tx.transaction_type} - {tx.amount0:.4f}/{tx.amount1:.4f}")
        return
    table = Table()
    table.add_column("Hash", style="dim", max_width=12)
    table.add_column("Type", style="cyan", max_width=10)
    table.add_column("Amount0", justify="right")
    table.add_column("Amount1", justify="right")
    table.add_column("Time", max_width=20)
    for tx in transactions:
        table.add_row(
            tx.hash[:10],
            truncate_string(tx.transaction_type, 10),
            f"{tx.amount0:.4f}",
            f"{tx.amount1:.4f}",
            truncate_string(format_timestamp(tx.timestamp), 20),
        )
    console.print(table)


def print_transactions_csv(transactions: List[Transaction]) -> None:
    _csv_rows(
        "hash,type,amount0,amount1,timestamp",
        ((tx.hash, tx.transaction_type, _num(tx.amount0), _num(tx.amount1), tx.timestamp) for tx in transactions),
    )


# Protocols

def print_protocols(console: Console, protocols: Any, detailed: bool = False) -> None:
    console.print("Supported Protocols:")
    items = protocols.get("protocols") if isinstance(protocols, dict) else protocols
    if detailed or not isinstance(items, list):
        print_json(protocols)
        return
    for i, protocol in enumerate(items, 1):
        if not isinstance(protocol, dict):
            continue
        name = protocol.get("name") or protocol.get("key")
        if name:
            click.echo(f"{i}. {name}")
