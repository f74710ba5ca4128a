"""
Command-line interface for offline withdrawal planning.

No network access: UTXO snapshots and bridge configuration are read from
JSON files produced by other tools.
"""

from __future__ import annotations

import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger
from pydantic import ValidationError

from utxoplan.config import ConnectorConfig, PlanOverrides, get_settings
from utxoplan.errors import PlanningError
from utxoplan.models import NetworkType, SortOrder, UtxoChain
from utxoplan.planner import WithdrawalPlanner

app = typer.Typer(
    name="utxoplan",
    help="UTXO withdrawal planning for Bitcoin and Zcash bridges",
    add_completion=False,
)


def setup_logging(level: str) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def load_json(path: Path) -> Any:
    """Load JSON from a file, or from stdin if path is '-'."""
    if str(path) == "-":
        return json.load(sys.stdin)
    if not path.is_file():
        raise ValueError(f"File not found: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_utxos(path: Path) -> list[dict[str, Any]]:
    """
    Load a UTXO snapshot.

    Accepts a JSON list of UTXOs or an object with a "utxos" list.
    """
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("utxos")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of UTXOs in {path}")
    return data


def merge_overrides(*layers: PlanOverrides) -> PlanOverrides:
    """Later layers win for every field they set."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer.model_dump(exclude_none=True))
    return PlanOverrides(**merged)


@app.command()
def plan(
    utxos_file: Annotated[
        Path, typer.Option("--utxos", "-u", help="UTXO snapshot JSON file ('-' for stdin)")
    ],
    amount: Annotated[str, typer.Option("--amount", "-a", help="Amount in smallest units")],
    destination: Annotated[
        str, typer.Option("--destination", "-d", help="Withdrawal destination address")
    ],
    change_address: Annotated[
        str | None,
        typer.Option("--change", "-c", help="Change address (defaults to connector config)"),
    ] = None,
    chain: Annotated[
        UtxoChain | None, typer.Option("--chain", help="UTXO chain (env UTXOPLAN_CHAIN)")
    ] = None,
    network: Annotated[
        NetworkType | None, typer.Option("--network", help="Network (env UTXOPLAN_NETWORK)")
    ] = None,
    fee_rate: Annotated[
        str | None, typer.Option("--fee-rate", "-r", help="Fee rate in sat/vbyte (Bitcoin)")
    ] = None,
    dust_threshold: Annotated[
        int | None, typer.Option("--dust", help="Dust threshold in smallest units")
    ] = None,
    min_change: Annotated[
        int | None, typer.Option("--min-change", help="Minimum change output value")
    ] = None,
    max_inputs: Annotated[
        int | None, typer.Option("--max-inputs", help="Maximum number of inputs")
    ] = None,
    sort: Annotated[
        SortOrder | None, typer.Option("--sort", help="Candidate ordering")
    ] = None,
    connector_config: Annotated[
        Path | None,
        typer.Option("--connector-config", help="Bridge connector config JSON file"),
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Build a withdrawal plan and print it as JSON."""
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging(log_level or "INFO")
        logger.error(f"Invalid settings: {e}")
        raise typer.Exit(1)
    setup_logging(log_level or settings.log_level)

    layers = [settings.overrides()]
    resolved_change = change_address
    resolved_rate: str | Decimal = fee_rate if fee_rate is not None else settings.fee_rate

    try:
        if connector_config is not None:
            connector = ConnectorConfig.model_validate(load_json(connector_config))
            layers.append(connector.to_overrides())
            resolved_change = resolved_change or connector.require_change_address()
            if fee_rate is None:
                resolved_rate = connector.fee_rate

        if not resolved_change:
            raise ValueError("Change address required. Use --change or --connector-config")

        layers.append(
            PlanOverrides(
                dust_threshold=dust_threshold,
                min_change=min_change,
                max_inputs=max_inputs,
                sort=sort,
            )
        )
        raw_utxos = load_utxos(utxos_file)
    except (ValueError, OSError, ValidationError, PlanningError) as e:
        logger.error(str(e))
        raise typer.Exit(1)

    planner = WithdrawalPlanner(chain=chain or settings.chain, network=network or settings.network)

    try:
        withdrawal_plan = planner.build_withdrawal_plan(
            raw_utxos,
            amount,
            destination,
            resolved_change,
            fee_rate=resolved_rate,
            overrides=merge_overrides(*layers),
        )
    except (PlanningError, ValueError) as e:
        logger.error(f"{planner.label}: {e}")
        raise typer.Exit(1)

    typer.echo(json.dumps(withdrawal_plan.model_dump(mode="json"), indent=2))


@app.command()
def fee(
    inputs: Annotated[int, typer.Option("--inputs", "-i", help="Number of inputs")],
    outputs: Annotated[int, typer.Option("--outputs", "-o", help="Number of outputs")],
    chain: Annotated[UtxoChain, typer.Option("--chain", help="UTXO chain")] = UtxoChain.BTC,
    fee_rate: Annotated[
        str | None, typer.Option("--fee-rate", "-r", help="Fee rate in sat/vbyte (Bitcoin)")
    ] = None,
) -> None:
    """Print the fee for a transaction shape."""
    planner = WithdrawalPlanner(chain=chain)
    try:
        typer.echo(str(planner.fee_calculator(fee_rate)(inputs, outputs)))
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(1)


@app.command()
def script(
    address: Annotated[str, typer.Argument(help="Address to encode")],
    chain: Annotated[UtxoChain, typer.Option("--chain", help="UTXO chain")] = UtxoChain.BTC,
    network: Annotated[
        NetworkType | None, typer.Option("--network", help="Require this network")
    ] = None,
) -> None:
    """Print the scriptPubKey hex for an address."""
    planner = WithdrawalPlanner(chain=chain, network=network)
    try:
        typer.echo(planner.address_to_script(address))
    except PlanningError as e:
        logger.error(str(e))
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
