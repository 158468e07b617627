from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field as SchemaField

from invitekit.canvas_sizes import CANVAS_SIZES, default_positions
from invitekit.config import DEFAULT_CONFIG, font_dirs, templates_root
from invitekit.constants import DEFAULT_PUBLIC_PREFIX
from invitekit.discover import discover_templates
from invitekit.overlay.injector import MeasureFunc, inject_field_values
from invitekit.render.typography import make_measure

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

SVG_MEDIA_TYPE = "image/svg+xml"

# Set by create_app (or tests) before the router serves requests
_templates_dir: Path | None = None
_public_prefix: str = DEFAULT_PUBLIC_PREFIX
_measure: MeasureFunc | None = None


class RenderRequest(BaseModel):
    """Field values for one template, keyed exactly like the catalog's field ids."""

    model_config = ConfigDict(populate_by_name=True)

    template_id: str = SchemaField(..., alias="templateId", min_length=1)
    field_values: dict[str, str] = SchemaField(default_factory=dict, alias="fieldValues")


def set_catalog_source(
    templates_dir: Path,
    public_prefix: str = DEFAULT_PUBLIC_PREFIX,
    measure: MeasureFunc | None = None,
) -> None:
    global _templates_dir, _public_prefix, _measure
    _templates_dir = templates_dir
    _public_prefix = public_prefix
    _measure = measure


def get_templates_dir() -> Path:
    if _templates_dir is None:
        raise HTTPException(500, "Template directory not configured")
    return _templates_dir


@router.get("/templates", tags=["Templates"])
def list_templates() -> JSONResponse:
    result = discover_templates(get_templates_dir(), public_prefix=_public_prefix)
    if result.error is not None:
        return JSONResponse(result.to_dict(), status_code=500)
    return JSONResponse(result.to_dict())


@router.post("/render", tags=["Templates"])
def render_template(request: RenderRequest) -> Response:
    result = discover_templates(get_templates_dir(), public_prefix=_public_prefix)
    if result.error is not None:
        raise HTTPException(500, f"Catalog failed to load: {result.error}")

    template = result.find(request.template_id)
    if template is None:
        raise HTTPException(404, f"Template not found: {request.template_id}")
    if template.overlay_path is None:
        raise HTTPException(404, f"Template has no text overlay: {request.template_id}")

    try:
        svg_text = template.overlay_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.error("cannot read overlay %s: %s", template.overlay_path, exc)
        raise HTTPException(500, f"Overlay unreadable: {request.template_id}") from exc

    if template.fields is not None:
        kwargs: dict[str, Any] = {"measure": _measure} if _measure is not None else {}
        svg_text = inject_field_values(svg_text, template.fields, request.field_values, **kwargs)
    return Response(content=svg_text, media_type=SVG_MEDIA_TYPE)


@router.get("/canvas-sizes", tags=["Canvas"])
def list_canvas_sizes() -> list[dict[str, Any]]:
    return [
        {**preset.to_dict(), "positions": default_positions(preset.width, preset.height)}
        for preset in CANVAS_SIZES
    ]


def create_app(cfg: dict[str, Any] | None = None) -> FastAPI:
    cfg = cfg or DEFAULT_CONFIG
    root = templates_root(cfg)
    public_prefix = str(cfg.get("public_prefix") or DEFAULT_PUBLIC_PREFIX)
    fallback_font = cfg.get("font_path")
    set_catalog_source(
        root,
        public_prefix=public_prefix,
        measure=make_measure(font_dirs(cfg), Path(fallback_font) if fallback_font else None),
    )

    app = FastAPI(title="InviteKit", description="Invitation template catalog and text overlay rendering")
    app.include_router(router)
    if root.is_dir():
        app.mount(public_prefix.rstrip("/") or "/", StaticFiles(directory=str(root)), name="templates")
    else:
        LOGGER.warning("templates directory %s does not exist; assets are not served", root)
    return app
