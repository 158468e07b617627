from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from invitekit.canvas_sizes import CANVAS_SIZES
from invitekit.check import ISSUE_ASPECT_MISMATCH, ISSUE_UNREADABLE, check_templates
from invitekit.config import font_dirs, load_config, templates_root, write_default_config
from invitekit.discover import discover_templates
from invitekit.overlay.injector import inject_field_values
from invitekit.overlay.parser import parse_overlay
from invitekit.render.typography import make_measure

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Invitation template catalog and overlay CLI.")
LOGGER = logging.getLogger("invitekit")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config_or_exit() -> dict:
    try:
        return load_config()
    except (OSError, ValueError) as exc:
        typer.secho(f"Config load failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)


def _parse_assignments(assignments: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"expected FIELD=TEXT, got: {item!r}")
        values[key] = value
    return values


def _read_values_file(path: Path) -> dict[str, str]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"values file is not a JSON object: {path}")
    # Accept a saved invitation's settings blob as well as a bare mapping
    if isinstance(data.get("fieldValues"), dict):
        data = data["fieldValues"]
    return {str(key): "" if value is None else str(value) for key, value in data.items()}


@app.command()
def catalog(
    root: Path | None = typer.Argument(None, resolve_path=True, help="Templates root (default: config templates_dir)."),
    prefix: str | None = typer.Option(None, "--prefix", help="Public URL prefix for asset paths."),
    log_level: str = typer.Option("warning", "--log-level"),
) -> None:
    """Print the discovered template catalog as JSON."""
    _setup_logging(log_level)
    cfg = _load_config_or_exit()
    templates_dir = root or templates_root(cfg)
    result = discover_templates(templates_dir, public_prefix=prefix or str(cfg["public_prefix"]))
    typer.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    if result.error is not None:
        raise typer.Exit(1)


@app.command()
def inject(
    svg: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    assignments: list[str] = typer.Option([], "--set", help="FIELD=TEXT, repeatable."),
    values_file: Path | None = typer.Option(None, "--values", exists=True, dir_okay=False, help="JSON object of field values."),
    out: Path | None = typer.Option(None, "--out", help="Write the result here instead of stdout."),
    log_level: str = typer.Option("warning", "--log-level"),
) -> None:
    """Substitute field text into an SVG overlay and re-centre it."""
    _setup_logging(log_level)
    cfg = _load_config_or_exit()
    try:
        values = _read_values_file(values_file) if values_file else {}
        values.update(_parse_assignments(assignments))
    except (OSError, ValueError) as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    svg_text = svg.read_text(encoding="utf-8")
    info = parse_overlay(svg_text)
    if info.fields is None:
        LOGGER.warning("no editable fields found in %s", svg.name)
        result = svg_text
    else:
        unknown = sorted(set(values) - {item.id for item in info.fields})
        if unknown:
            LOGGER.warning("ignoring values for unknown fields: %s", ", ".join(unknown))
        fallback_font = cfg.get("font_path")
        measure = make_measure(font_dirs(cfg), Path(fallback_font) if fallback_font else None)
        result = inject_field_values(svg_text, info.fields, values, measure=measure)

    if out is None:
        typer.echo(result)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result, encoding="utf-8")
        typer.echo(f"Written: {out}")


@app.command()
def check(
    root: Path | None = typer.Argument(None, resolve_path=True, help="Templates root (default: config templates_dir)."),
) -> None:
    """Validate overlay assets: viewBox, paired image, aspect ratio, editable groups."""
    cfg = _load_config_or_exit()
    templates_dir = root or templates_root(cfg)
    try:
        reports = check_templates(templates_dir)
    except OSError as exc:
        typer.secho(f"Cannot scan {templates_dir}: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    total_issues = 0
    for folder in reports:
        typer.secho(f"\n{folder.folder}/", bold=True, fg=typer.colors.CYAN)
        if not folder.overlays:
            typer.echo("  (no SVG files)")
        for report in folder.overlays:
            typer.secho(f"\n  {report.svg_name}", bold=True)
            if ISSUE_UNREADABLE in report.issues:
                typer.secho("  ✗ Unreadable overlay: cannot be read as UTF-8 text", fg=typer.colors.RED)
                typer.secho(f"  → {len(report.issues)} issue(s) above", fg=typer.colors.RED)
                continue
            if report.view_box:
                typer.echo(f"  ✓ viewBox: {report.view_box[0]:g} × {report.view_box[1]:g}")
            else:
                typer.secho('  ✗ Missing viewBox: add viewBox="0 0 W H" to the <svg> tag', fg=typer.colors.RED)
            if report.image_name is None:
                typer.secho("  ⚠ No matching image: template will be skipped", fg=typer.colors.YELLOW)
            else:
                typer.echo(f"  ✓ Image: {report.image_name}")
                ratios = report.aspect_ratios
                if ratios is not None:
                    image_ratio, svg_ratio = ratios
                    if ISSUE_ASPECT_MISMATCH in report.issues:
                        typer.secho(
                            f"  ✗ Aspect ratio mismatch: image {image_ratio:.3f} vs viewBox {svg_ratio:.3f}",
                            fg=typer.colors.RED,
                        )
                    else:
                        typer.echo("  ✓ Aspect ratio matches")
            if report.editable_ids:
                typer.echo("  ✓ Editable fields: " + ", ".join(f'"{item}"' for item in report.editable_ids))
            else:
                typer.secho('  ✗ No editable <g id> groups: wrap editable text in <g id="name">', fg=typer.colors.RED)
            if report.has_static_text:
                typer.echo('  ✓ "static_text" group present')
            if report.has_bare_text:
                typer.secho("  ⚠ <text> elements found outside any <g id> group", fg=typer.colors.YELLOW)
            if report.ok:
                typer.secho("  → All good!", fg=typer.colors.GREEN)
            else:
                typer.secho(f"  → {len(report.issues)} issue(s) above", fg=typer.colors.RED)
        total_issues += folder.issue_count

    if total_issues:
        typer.secho(f"\n{total_issues} issue(s) found.", fg=typer.colors.RED, bold=True)
        raise typer.Exit(1)
    typer.secho("\nAll templates are valid!", fg=typer.colors.GREEN, bold=True)


@app.command()
def sizes() -> None:
    """List the canvas-size presets."""
    typer.echo(json.dumps([preset.to_dict() for preset in CANVAS_SIZES], ensure_ascii=False, indent=2))


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port", min=1, max=65535),
    root: Path | None = typer.Option(None, "--root", resolve_path=True, help="Templates root."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Serve the catalog and render endpoints over HTTP."""
    cfg = _load_config_or_exit()
    if root is not None:
        cfg["templates_dir"] = str(root)
    level = log_level or str(cfg.get("log_level") or "info")
    _setup_logging(level)

    try:
        import uvicorn

        from invitekit.api import create_app
    except Exception as exc:
        typer.secho(f"HTTP server is unavailable: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    LOGGER.info("serving templates from %s", templates_root(cfg))
    uvicorn.run(
        create_app(cfg),
        host=host or str(cfg["host"]),
        port=int(port or cfg["port"]),
        log_level=level.lower(),
    )


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
