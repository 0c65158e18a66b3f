"""CLI commands for Mobility-Rx."""

from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from mobility_rx.models.patient import PatientContext
from mobility_rx.models.prescription import (
    BaselineRecommendation,
    PrescriptionField,
    PrescriptionParameters,
)

app = typer.Typer(
    name="mobility-rx",
    help="Energy-preserving exercise prescription engine for bed-cycle ergometry",
    add_completion=False,
)
console = Console()


def _patient(level_of_care: str, mobility: str, age: Optional[int]) -> PatientContext:
    return PatientContext(level_of_care=level_of_care, mobility_status=mobility, age=age)


def _display_parameters(title: str, parameters: PrescriptionParameters) -> None:
    table = Table(title=title)
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Unit")
    table.add_row("Power", f"{parameters.power_watts:.1f}", "watts")
    table.add_row("Duration", f"{parameters.duration_minutes:.1f}", "minutes")
    table.add_row("Resistance", str(parameters.resistance_level), "level")
    table.add_row("Sessions", str(parameters.sessions_per_day), "per day")
    table.add_row("Daily energy", f"{parameters.total_daily_energy:.0f}", "Watt-Min")
    console.print(table)


@app.command()
def device():
    """Show the resistance -> force -> power table for the ergometer."""
    from mobility_rx.prescription.device import (
        ASSUMED_RPM,
        FLYWHEEL_DIAMETER_IN,
        resistance_to_force,
        resistance_to_power,
    )

    table = Table(title=f"Ergometer at {ASSUMED_RPM} RPM, {FLYWHEEL_DIAMETER_IN}\" flywheel")
    table.add_column("Level", justify="right", style="cyan")
    table.add_column("Force (lb)", justify="right")
    table.add_column("Power (W)", justify="right")
    for level in range(1, 10):
        table.add_row(
            str(level),
            f"{resistance_to_force(level):.1f}",
            f"{resistance_to_power(level):.1f}",
        )
    console.print(table)


@app.command()
def recalibrate(
    field: str = typer.Argument(..., help="Edited field: power, duration, resistance, sessions, energy"),
    value: float = typer.Argument(..., help="New value for the edited field"),
    power: float = typer.Option(35.0, "--power", help="Current power (W)"),
    duration: float = typer.Option(15.0, "--duration", help="Current minutes per session"),
    resistance: int = typer.Option(5, "--resistance", help="Current resistance level"),
    sessions: int = typer.Option(2, "--sessions", help="Current sessions per day"),
    target: Optional[float] = typer.Option(
        None, "--target", "-t", help="Daily energy target (default: current energy)"
    ),
    level_of_care: str = typer.Option("ward", "--level-of-care", "-l"),
    mobility: str = typer.Option("bedbound", "--mobility", "-m"),
    age: Optional[int] = typer.Option(75, "--age"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Recalibrate a prescription after one field changes, preserving energy."""
    from mobility_rx.prescription.acuity import classify_acuity
    from mobility_rx.prescription.recalibration import recalibrate as run_recalibration

    try:
        changed = PrescriptionField(field)
    except ValueError:
        console.print(f"[red]Invalid field: {field}[/red]")
        raise typer.Exit(1)

    try:
        current = PrescriptionParameters(
            power_watts=power,
            duration_minutes=duration,
            resistance_level=resistance,
            sessions_per_day=sessions,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid prescription: {e.error_count()} field(s) out of range[/red]")
        raise typer.Exit(1)
    acuity = classify_acuity(_patient(level_of_care, mobility, age))
    target_energy = target if target is not None else current.total_daily_energy

    result = run_recalibration(current, changed, value, target_energy, acuity)

    if output_json:
        console.print_json(result.model_dump_json())
    else:
        _display_parameters(f"Recalibrated ({acuity.value}, target {target_energy:.0f} W-min)", result)


@app.command()
def rescale(
    target: float = typer.Argument(..., help="New daily energy target (watt-minutes)"),
    watt_goal: float = typer.Option(35.0, "--watt-goal", help="Baseline watts"),
    duration: float = typer.Option(15.0, "--duration", help="Baseline minutes per session"),
    sessions: int = typer.Option(2, "--sessions", help="Baseline sessions per day"),
    level_of_care: str = typer.Option("ward", "--level-of-care", "-l"),
    mobility: str = typer.Option("bedbound", "--mobility", "-m"),
    age: Optional[int] = typer.Option(75, "--age"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Re-scale the AI baseline onto a new daily energy target."""
    from mobility_rx.prescription.rescaler import rescale as run_rescale

    baseline = BaselineRecommendation(
        watt_goal=watt_goal,
        duration_min_per_session=duration,
        sessions_per_day=sessions,
    )
    result = run_rescale(baseline, target, _patient(level_of_care, mobility, age))

    if output_json:
        console.print_json(result.model_dump_json())
        return

    basis = result.evidence_basis
    _display_parameters(
        f"Rescaled {basis.ai_base_energy:.0f} -> {target:.0f} W-min "
        f"(x{basis.energy_ratio}, {result.strategy.value})",
        result.parameters,
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind (default: API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Start the API server."""
    import uvicorn

    from mobility_rx.config import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"Starting Mobility-Rx API server on {host}:{port}")
    uvicorn.run(
        "mobility_rx.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version():
    """Show version information."""
    from mobility_rx import __version__

    console.print(f"Mobility-Rx version {__version__}")
