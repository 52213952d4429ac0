"""CLI entry point for draw-auction."""

from decimal import InvalidOperation

import click
import yaml
from web3 import Web3

from .auction import AuctionConfig, DrawAuction, parse_amount
from .chain import PrizePoolContract, RngContract
from .errors import AuctionError
from .events import DrawCompleted
from .pool import InMemoryRandomness, InMemoryWorkPool
from .rewards import DEFAULT_CURVE, UNIT
from .timing import ManualClock

DEFAULT_AUCTION = {
    "duration": 6 * 3600,
    "target_time": 3600,
    "max_rewards": 10**18,
    "max_retries": 3,
    "first_trigger_fraction": "0.1",
    "first_completion_fraction": "0.2",
}

TRIGGERER = "0x" + "11" * 20
RETRIER = "0x" + "22" * 20
COMPLETER = "0x" + "33" * 20


def load_config(path: str | None) -> dict:
    if path is None:
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def auction_settings(cfg: dict, **overrides) -> dict:
    settings = dict(DEFAULT_AUCTION)
    settings.update(cfg.get("auction") or {})
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return settings


def amount_option(scale: int = 1):
    """click callback parsing a decimal amount option such as 1e18 or 0.1."""
    def callback(ctx, param, value):
        try:
            return parse_amount(value, scale)
        except (InvalidOperation, ValueError):
            raise click.BadParameter(f"{value!r} is not a number")
    return callback


@click.group()
@click.option("--rpc", envvar="RPC_URL", default=None, help="Ethereum RPC URL")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True), help="Path to config.yaml")
@click.pass_context
def cli(ctx, rpc, config_path):
    """Draw auction: reward whoever triggers and completes each draw."""
    cfg = load_config(config_path)
    ctx.ensure_object(dict)
    ctx.obj["rpc_url"] = rpc or cfg.get("rpc_url")
    ctx.obj["prize_pool"] = cfg.get("prize_pool")
    ctx.obj["rng"] = cfg.get("rng")
    ctx.obj["config"] = cfg


@cli.command()
@click.option("--duration", default=None, type=int, help="Auction window in seconds")
@click.option("--target-time", default=None, type=int, help="Seconds into the window where the reward equals the last fraction")
@click.option("--last-fraction", "last", default="0.1", callback=amount_option(UNIT), help="Last observed reward fraction (default: 0.1)")
@click.option("--pool", default="1e18", callback=amount_option(), help="Reward pool (default: 1e18)")
@click.option("--steps", default=12, type=int, help="Rows in the table (default: 12)")
@click.pass_context
def curve(ctx, duration, target_time, last, pool, steps):
    """Print the reward fraction and amount across the auction window."""
    settings = auction_settings(ctx.obj["config"], duration=duration, target_time=target_time)
    try:
        config = AuctionConfig.from_dict(settings)
    except AuctionError as e:
        raise click.ClickException(str(e))

    click.echo(f"Window {config.duration}s, target {config.target_time}s, last fraction {last / UNIT:.4f}")
    click.echo(f"{'elapsed':>10}  {'fraction':>10}  {'amount':>28}")
    for i in range(steps + 1):
        elapsed = config.duration * i // steps
        fraction = DEFAULT_CURVE.fraction(elapsed, config.duration, config.target_fraction, last)
        amount = DEFAULT_CURVE.amount(fraction, pool)
        click.echo(f"{elapsed:>10}  {fraction / UNIT:>10.6f}  {amount:>28}")


@cli.command()
@click.option("--reserve", default="1e18", callback=amount_option(), help="Reserve available for rewards (default: 1e18)")
@click.option("--draw-period", default=86400, type=int, help="Draw period in seconds (default: 86400)")
@click.option("--trigger-delay", default=0, type=int, help="Seconds after draw close before the trigger (default: 0)")
@click.option("--complete-delay", default=3600, type=int, help="Seconds after the last trigger before completion (default: 3600)")
@click.option("--fail-first", is_flag=True, default=False, help="Fail the first RNG request and retry")
@click.option("--retry-delay", default=600, type=int, help="Seconds between the failed trigger and the retry (default: 600)")
@click.option("--random", "random_value", default=0xC0FFEE, type=int, help="Random number delivered by the RNG")
@click.pass_context
def simulate(ctx, reserve, draw_period, trigger_delay, complete_delay, fail_first,
             retry_delay, random_value):
    """Run one draw cycle against in-memory collaborators and print the payouts."""
    cfg = ctx.obj["config"]
    try:
        config = AuctionConfig.from_dict(auction_settings(cfg))

        clock = ManualClock()
        work_pool = InMemoryWorkPool(clock, draw_period, reserve=reserve)
        rng = InMemoryRandomness(clock)
        auction = DrawAuction(config, work_pool, rng, clock)
        completed = []

        def on_event(event):
            if isinstance(event, DrawCompleted):
                completed.append(event)

        auction.subscribe(on_event)

        clock.set(work_pool.draw_close_time(work_pool.due_draw_id()) + trigger_delay)
        request_id = rng.request()
        auction.attempt_trigger(TRIGGERER, request_id)
        if fail_first:
            rng.fail(request_id)
            clock.advance(retry_delay)
            request_id = rng.request()
            auction.attempt_trigger(RETRIER, request_id)
        rng.fulfill(request_id, random_value)
        clock.advance(complete_delay)
        auction.complete_draw(COMPLETER)
    except AuctionError as e:
        raise click.ClickException(str(e))

    event = completed[-1]
    click.echo(f"\nDraw {event.draw_id} settled")
    for recipient, amount in zip(event.recipients, event.amounts):
        click.echo(f"  {recipient}  {amount}")
    click.echo(f"Leftover:            {event.leftover}")
    click.echo(f"Reserve after:       {work_pool.reserve_balance()}")
    click.echo(f"Next trigger anchor: {auction.anchors.trigger_fraction / UNIT:.6f}")
    click.echo(f"Next finish anchor:  {auction.anchors.completion_fraction / UNIT:.6f}")
    click.echo(f"State:               {auction.state().value}")


def make_web3(rpc_url: str) -> Web3:
    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        raise click.ClickException(f"Cannot connect to RPC: {rpc_url}")
    return w3


def get_prize_pool(ctx) -> PrizePoolContract:
    obj = ctx.obj
    if not obj.get("rpc_url"):
        raise click.ClickException("RPC URL required (--rpc or config rpc_url)")
    if not obj.get("prize_pool"):
        raise click.ClickException("Prize pool address required (config prize_pool)")
    return PrizePoolContract(make_web3(obj["rpc_url"]), obj["prize_pool"])


@cli.command()
@click.option("--request", "request_id", default=None, type=int, help="RNG request id to inspect")
@click.pass_context
def status(ctx, request_id):
    """Show the due draw, its close time and the reward reserve."""
    prize_pool = get_prize_pool(ctx)
    info = prize_pool.status()
    click.echo(f"Prize pool:          {info['prize_pool']}")
    click.echo(f"Due draw:            {info['due_draw_id']}")
    click.echo(f"Closes at:           {info['draw_closes_at']}")
    click.echo(f"Draw period:         {info['draw_period']}s")
    click.echo(f"Reserve:             {info['reserve']}")
    click.echo(f"Pending reserve:     {info['pending_reserve']}")

    rng_address = ctx.obj.get("rng")
    if rng_address and request_id is not None:
        rng = RngContract(prize_pool.w3, rng_address)
        click.echo(f"\nRNG request {request_id}:")
        click.echo(f"  Requested at block: {rng.requested_at_tick(request_id)}")
        click.echo(f"  Complete:           {rng.is_complete(request_id)}")
        click.echo(f"  Failed:             {rng.is_failed(request_id)}")


if __name__ == "__main__":
    cli()
