import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

import typer

from safewatch.domain.clustering import HotspotSettings, aggregate_hotspots, detect_hotspot
from safewatch.domain.errors import ReportValidationError
from safewatch.domain.ids import SequentialIds
from safewatch.domain.models import Location, Report, to_utc
from safewatch.settings import load_hotspot_settings

app = typer.Typer(help="CLI para inspeccionar hotspots de reportes comunitarios")


def _demo_payload(now: datetime) -> list[dict]:
    def ago(minutes: int) -> str:
        return (now - timedelta(minutes=minutes)).isoformat()

    return [
        {"id": "DEMO1", "category": "Drug Activity", "description": "Exchange at the corner",
         "latitude": 40.4168, "longitude": -3.7038, "submittedAt": ago(50)},
        {"id": "DEMO2", "category": "Suspicious Behavior", "description": "Loitering by the park gate",
         "latitude": 40.4170, "longitude": -3.7040, "submittedAt": ago(30)},
        {"id": "DEMO3", "category": "Drug Activity", "description": "Same group again",
         "latitude": 40.4172, "longitude": -3.7035, "submittedAt": ago(10)},
        {"id": "DEMO4", "category": "Environmental Hazard", "description": "Dumped chemicals",
         "latitude": 40.4400, "longitude": -3.6800, "submittedAt": ago(20)},
        {"id": "DEMO5", "category": "Other", "description": "No location shared",
         "submittedAt": ago(5)},
    ]


def _load_reports(file: Optional[Path], now: datetime) -> List[Report]:
    if file is not None:
        payload = json.loads(file.read_text())
    else:
        payload = _demo_payload(now)
    fallback_ids = SequentialIds(prefix="R")
    reports = []
    for item in payload:
        try:
            location = item.get("location") or {}
            reports.append(
                Report(
                    id=str(item.get("id") or fallback_ids()),
                    category=item["category"],
                    description=item.get("description", ""),
                    contact_info=item.get("contactInfo"),
                    location=Location.from_parts(
                        item.get("latitude", location.get("latitude")),
                        item.get("longitude", location.get("longitude")),
                    ),
                    media_ref=item.get("mediaRef"),
                    submitted_at=_parse_timestamp(item["submittedAt"]),
                    status=item.get("status", "submitted"),
                )
            )
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            label = item.get("id") if isinstance(item, dict) else item
            typer.echo(f"Skipping invalid report {label!r}: {exc}", err=True)
    return reports


def _resolve_settings(
    radius: Optional[float], min_reports: Optional[int], window_hours: Optional[float]
) -> HotspotSettings:
    base = load_hotspot_settings()
    return HotspotSettings(
        radius=radius if radius is not None else base.radius,
        min_reports=min_reports if min_reports is not None else base.min_reports,
        time_window=timedelta(hours=window_hours) if window_hours is not None else base.time_window,
    )


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if isinstance(value, str) and value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(value))


def _resolve_now(now: Optional[str]) -> datetime:
    if not now:
        return datetime.now(timezone.utc)
    try:
        return _parse_timestamp(now)
    except ValueError as exc:
        raise typer.BadParameter(f"invalid ISO-8601 timestamp: {now!r}", param_hint="--now") from exc


@app.command("hotspots")
def cli_hotspots(
    file: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="JSON con la lista de reportes"),
    now: Optional[str] = typer.Option(None, help="Instante de referencia ISO-8601"),
    radius: Optional[float] = typer.Option(None, help="Radio en grados"),
    min_reports: Optional[int] = typer.Option(None, help="Mínimo de reportes por hotspot"),
    window_hours: Optional[float] = typer.Option(None, help="Ventana temporal en horas"),
):
    reference = _resolve_now(now)
    reports = _load_reports(file, reference)
    hotspots = aggregate_hotspots(reports, reference, _resolve_settings(radius, min_reports, window_hours))
    if not hotspots:
        typer.echo("No se encontraron hotspots activos")
        raise typer.Exit(code=0)
    typer.echo("id\tlat\tlng\treports\tcategories")
    for hs in hotspots:
        categories = ",".join(sorted(c.value for c in hs.categories))
        typer.echo(
            f"{hs.id}\t{hs.center.latitude:.5f}\t{hs.center.longitude:.5f}\t{hs.report_count}\t{categories}"
        )


@app.command("detect")
def cli_detect(
    lat: float = typer.Option(..., help="Latitud del nuevo reporte"),
    lng: float = typer.Option(..., help="Longitud del nuevo reporte"),
    category: str = typer.Option("Other", help="Categoría del nuevo reporte"),
    file: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="JSON con reportes previos"),
    now: Optional[str] = typer.Option(None, help="Instante de referencia ISO-8601"),
):
    reference = _resolve_now(now)
    existing = _load_reports(file, reference)
    try:
        candidate = Report(
            id="CANDIDATE",
            category=category,
            description="candidate",
            location=Location.from_parts(lat, lng),
            submitted_at=reference,
        )
    except ReportValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    result = detect_hotspot(candidate, existing, reference, load_hotspot_settings())
    if not result.is_hotspot:
        typer.echo("Sin hotspot en esa ubicación")
        raise typer.Exit(code=0)
    typer.echo(
        f"Hotspot {result.hotspot_id}: {result.report_count} reportes, "
        f"centro {result.center.latitude:.5f},{result.center.longitude:.5f}"
    )


if __name__ == "__main__":
    app()
