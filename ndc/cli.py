"""NDC correlator CLI -- build NDC 21.3 requests and read airline responses.

Provides commands for building request XML from YAML request files,
parsing response XML into structured results, reconciling prices, and
inspecting the party configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated, Callable, Optional

import typer
import yaml
from pydantic import BaseModel, ValidationError

from ndc.errors import NDCError

# ---------------------------------------------------------------------------
# App and sub-apps
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="ndc",
    help="NDC 21.3 message builder and response parser for Jetstar (JQ).",
    no_args_is_help=True,
)

build_app = typer.Typer(
    name="build",
    help="Build request XML from a YAML request file.",
    no_args_is_help=True,
)

parse_app = typer.Typer(
    name="parse",
    help="Parse response XML into a structured result.",
    no_args_is_help=True,
)

config_app = typer.Typer(
    name="config",
    help="Inspect the party configuration.",
    no_args_is_help=True,
)

app.add_typer(build_app, name="build")
app.add_typer(parse_app, name="parse")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Global option types
# ---------------------------------------------------------------------------

JsonFlag = Annotated[bool, typer.Option("--json", help="Output as JSON.")]
PlainFlag = Annotated[bool, typer.Option("--plain", help="Output as plain text (no color).")]
VerboseFlag = Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output.")]
QuietFlag = Annotated[bool, typer.Option("--quiet", "-q", help="Suppress non-essential output.")]
PartyOption = Annotated[
    Optional[Path],
    typer.Option("--party", help="Party configuration YAML (defaults to the bundled chain)."),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_format(json_flag: bool = False, plain_flag: bool = False) -> str:
    """Determine output format: json > plain > TTY auto-detect > rich."""
    if json_flag:
        return "json"
    if plain_flag:
        return "plain"
    if sys.stdout.isatty():
        return "rich"
    return "plain"


def _setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)


def _existing(file: str) -> Path:
    path = Path(file)
    if not path.exists():
        hint = ""
        if not path.is_absolute():
            hint = f" (looked in {Path.cwd()})"
        raise typer.BadParameter(
            f"File not found: {file}{hint}\n  Hint: Check the file path and try again."
        )
    return path


def _load_request(file: str, model: type[BaseModel]) -> BaseModel:
    """Load a YAML request file into a request model.

    Provides helpful error messages for:
    - File not found
    - YAML parse errors (with line/column)
    - Pydantic validation errors (with field-level messages)
    """
    path = _existing(file)

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        msg = f"YAML parse error in {file}"
        if hasattr(exc, "problem_mark") and exc.problem_mark is not None:
            mark = exc.problem_mark
            msg += f" at line {mark.line + 1}, column {mark.column + 1}"
        if hasattr(exc, "problem") and exc.problem:
            msg += f": {exc.problem}"
        raise typer.BadParameter(msg)

    if not isinstance(raw, dict):
        raise typer.BadParameter(
            f"Expected a YAML mapping (dict) in {file}, got {type(raw).__name__}"
        )

    try:
        return model(**raw)
    except ValidationError as exc:
        lines = [f"Validation errors in {file}:"]
        for err in exc.errors():
            loc = " -> ".join(str(x) for x in err["loc"])
            lines.append(f"  {loc}: {err['msg']}")
        raise typer.BadParameter("\n".join(lines))


def _load_party(party: Optional[Path]):
    from ndc.config import load_party_config

    if party is not None:
        _existing(str(party))
    return load_party_config(party)


def _error_panel(message: str) -> None:
    """Print an error message, using Rich panel if available."""
    try:
        from rich.console import Console
        from rich.panel import Panel

        console = Console(stderr=True)
        console.print(Panel(message, title="Error", border_style="red"))
    except Exception:
        typer.echo(f"Error: {message}", err=True)


def _run_build(file: str, party: Optional[Path], model: type[BaseModel], builder: Callable) -> None:
    try:
        request = _load_request(file, model)
        typer.echo(builder(request, _load_party(party)), nl=False)
    except typer.BadParameter:
        raise
    except (NDCError, ValueError) as exc:
        _error_panel(str(exc))
        raise typer.Exit(code=2)


def _run_parse(file: str, parser: Callable, format_name: str, json: bool, plain: bool) -> None:
    try:
        path = _existing(file)
        result = parser(path.read_bytes())
        from ndc.output import get_formatter

        fmt = get_formatter(_get_format(json, plain))
        typer.echo(getattr(fmt, format_name)(result))

        if not result.success:
            raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except typer.BadParameter:
        raise
    except Exception as exc:
        _error_panel(str(exc))
        raise typer.Exit(code=2)


# ---------------------------------------------------------------------------
# Build commands
# ---------------------------------------------------------------------------


@build_app.command(name="service-list")
def build_service_list_cmd(
    file: str = typer.Argument(help="Path to ServiceList request YAML"),
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build an IATA_ServiceListRQ."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_service_list
    from ndc.builders.models import ServiceListRequest

    _run_build(file, party, ServiceListRequest, build_service_list)


@build_app.command(name="seat-availability")
def build_seat_availability_cmd(
    file: str = typer.Argument(help="Path to SeatAvailability request YAML"),
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build an IATA_SeatAvailabilityRQ."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_seat_availability
    from ndc.builders.models import SeatAvailabilityRequest

    _run_build(file, party, SeatAvailabilityRequest, build_seat_availability)


@build_app.command(name="long-sell")
def build_long_sell_cmd(
    file: str = typer.Argument(help="Path to long sell request YAML"),
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build a long sell IATA_OfferPriceRQ from flight details."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_long_sell
    from ndc.builders.models import LongSellRequest

    _run_build(file, party, LongSellRequest, build_long_sell)


@build_app.command(name="offer-price")
def build_offer_price_cmd(
    file: str = typer.Argument(help="Path to OfferPrice request YAML"),
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build an IATA_OfferPriceRQ for selected offers."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_offer_price
    from ndc.builders.models import OfferPriceRequest

    _run_build(file, party, OfferPriceRequest, build_offer_price)


@build_app.command(name="order-create")
def build_order_create_cmd(
    file: str = typer.Argument(help="Path to OrderCreate request YAML"),
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build an IATA_OrderCreateRQ."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_order_create
    from ndc.builders.models import OrderCreateRequest

    _run_build(file, party, OrderCreateRequest, build_order_create)


@build_app.command(name="order-change-payment")
def build_order_change_payment_cmd(
    file: str = typer.Argument(help="Path to OrderChange payment request YAML"),
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build an IATA_OrderChangeRQ that pays for an order."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_order_change_payment
    from ndc.builders.models import OrderChangePaymentRequest

    _run_build(file, party, OrderChangePaymentRequest, build_order_change_payment)


@build_app.command(name="order-retrieve")
def build_order_retrieve_cmd(
    order_id: str = typer.Argument(help="Airline order id"),
    owner: Annotated[Optional[str], typer.Option("--owner", help="Order owner code.")] = None,
    party: PartyOption = None,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Build an IATA_OrderRetrieveRQ."""
    _setup_logging(verbose, quiet)
    from ndc.builders import build_order_retrieve
    from ndc.builders.models import OrderRetrieveRequest

    try:
        request = OrderRetrieveRequest(order_id=order_id, owner_code=owner)
        typer.echo(build_order_retrieve(request, _load_party(party)), nl=False)
    except typer.BadParameter:
        raise
    except (NDCError, ValueError) as exc:
        _error_panel(str(exc))
        raise typer.Exit(code=2)


# ---------------------------------------------------------------------------
# Parse commands
# ---------------------------------------------------------------------------


@parse_app.command(name="service-list")
def parse_service_list_cmd(
    file: str = typer.Argument(help="Path to ServiceList response XML"),
    json: JsonFlag = False,
    plain: PlainFlag = False,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Parse an IATA_ServiceListRS."""
    _setup_logging(verbose, quiet)
    from ndc.parsers import parse_service_list

    _run_parse(file, parse_service_list, "format_service_list", json, plain)


@parse_app.command(name="seat-availability")
def parse_seat_availability_cmd(
    file: str = typer.Argument(help="Path to SeatAvailability response XML"),
    json: JsonFlag = False,
    plain: PlainFlag = False,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Parse an IATA_SeatAvailabilityRS."""
    _setup_logging(verbose, quiet)
    from ndc.parsers import parse_seat_availability

    _run_parse(file, parse_seat_availability, "format_seat_availability", json, plain)


@parse_app.command(name="offer-price")
def parse_offer_price_cmd(
    file: str = typer.Argument(help="Path to OfferPrice response XML"),
    json: JsonFlag = False,
    plain: PlainFlag = False,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Parse an IATA_OfferPriceRS with per-flight price breakdowns."""
    _setup_logging(verbose, quiet)
    from ndc.parsers import parse_offer_price

    _run_parse(file, parse_offer_price, "format_offer_price", json, plain)


@parse_app.command(name="order")
def parse_order_cmd(
    file: str = typer.Argument(help="Path to OrderView / OrderCreate / OrderRetrieve response XML"),
    json: JsonFlag = False,
    plain: PlainFlag = False,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Parse an order response."""
    _setup_logging(verbose, quiet)
    from ndc.parsers import parse_order

    _run_parse(file, parse_order, "format_order", json, plain)


@parse_app.command(name="generic")
def parse_generic_cmd(
    file: str = typer.Argument(help="Path to any NDC response XML"),
    json: JsonFlag = False,
    plain: PlainFlag = False,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Extract errors, warnings, and identifiers from any response."""
    _setup_logging(verbose, quiet)
    from ndc.parsers import parse_generic

    _run_parse(file, parse_generic, "format_generic", json, plain)


# ---------------------------------------------------------------------------
# Reconcile
# ---------------------------------------------------------------------------


def _authoritative_snapshot(value: str, currency: str):
    """A number, or an OfferPrice response file to take the quote from."""
    from ndc.pricing import PriceSnapshot, SnapshotStage

    path = Path(value)
    if path.is_file():
        from ndc.parsers import parse_offer_price
        from ndc.pricing import snapshot_from_offer_price

        result = parse_offer_price(path.read_bytes())
        if not result.success:
            messages = "; ".join(f"[{e.code}] {e.message}" for e in result.errors)
            raise NDCError(f"{value}: OfferPrice failed: {messages}", "PRICING_FAILED")
        return snapshot_from_offer_price(result)
    try:
        total = float(value)
    except ValueError:
        raise typer.BadParameter(f"Expected an amount or an OfferPrice response file, got {value!r}")
    return PriceSnapshot(stage=SnapshotStage.PRICING, total=total, currency=currency)


@app.command()
def reconcile(
    estimate: float = typer.Argument(help="Estimated fare total from shopping"),
    authoritative: str = typer.Argument(help="Quoted fare total, or an OfferPrice response XML file"),
    currency: Annotated[str, typer.Option("--currency", help="Currency of the estimate.")] = "AUD",
    json: JsonFlag = False,
    plain: PlainFlag = False,
    verbose: VerboseFlag = False,
    quiet: QuietFlag = False,
) -> None:
    """Compare a shopping estimate against the airline's quoted price."""
    _setup_logging(verbose, quiet)
    try:
        from ndc.output import get_formatter
        from ndc.pricing import PriceSnapshot, reconcile as reconcile_prices

        quoted = _authoritative_snapshot(authoritative, currency)
        report = reconcile_prices(PriceSnapshot(total=estimate, currency=currency), quoted)
        fmt = get_formatter(_get_format(json, plain))
        typer.echo(fmt.format_reconciliation(report))

        if not report.matches:
            raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except typer.BadParameter:
        raise
    except Exception as exc:
        _error_panel(str(exc))
        raise typer.Exit(code=2)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@config_app.command(name="show")
def config_show(
    party: PartyOption = None,
    json: JsonFlag = False,
) -> None:
    """Show the effective party configuration (YAML, environment applied)."""
    try:
        config = _load_party(party)
    except typer.BadParameter:
        raise
    except (NDCError, ValueError) as exc:
        _error_panel(str(exc))
        raise typer.Exit(code=2)

    data = config.model_dump(mode="json")
    if json:
        import json as json_mod

        typer.echo(json_mod.dumps(data, indent=2))
    else:
        typer.echo(yaml.safe_dump(data, sort_keys=False), nl=False)


if __name__ == "__main__":
    app()
