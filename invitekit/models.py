from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from invitekit.constants import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH

# Field id -> replacement text. Absent keys leave the overlay text untouched.
FieldValues = Mapping[str, str]


@dataclass(slots=True, frozen=True)
class Field:
    id: str
    label: str
    placeholder: str = ""
    rtl: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "placeholder": self.placeholder,
            "rtl": self.rtl,
        }


@dataclass(slots=True, frozen=True)
class CanvasSize:
    width: int = DEFAULT_CANVAS_WIDTH
    height: int = DEFAULT_CANVAS_HEIGHT


@dataclass(slots=True, frozen=True)
class OverlayInfo:
    canvas: CanvasSize
    fields: tuple[Field, ...] | None = None


@dataclass(slots=True)
class Template:
    id: str
    name: str
    category: str
    thumbnail_src: str
    text_svg: str | None = None
    overlay_path: Path | None = None
    fields: tuple[Field, ...] | None = None
    canvas: CanvasSize = field(default_factory=CanvasSize)

    def __post_init__(self) -> None:
        if self.fields is not None and self.text_svg is None:
            raise ValueError(f"template {self.id!r} has fields but no overlay")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "thumbnailSrc": self.thumbnail_src,
        }
        if self.text_svg is not None:
            payload["textSvg"] = self.text_svg
        if self.fields is not None:
            payload["fields"] = [item.to_dict() for item in self.fields]
        payload["style"] = {
            "canvasWidth": self.canvas.width,
            "canvasHeight": self.canvas.height,
        }
        return payload


@dataclass(slots=True)
class DiscoveryResult:
    templates: list[Template] = field(default_factory=list)
    error: str | None = None

    def find(self, template_id: str) -> Template | None:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"templates": [tpl.to_dict() for tpl in self.templates]}
        if self.error is not None:
            payload["error"] = self.error
        return payload


def _pick(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in row:
            return row[key]
    return None


@dataclass(slots=True, frozen=True)
class Invitation:
    """A saved invitation as the external store returns it.

    Only ``settings["fieldValues"]`` matters here: it is keyed by ``Field.id``
    and is handed to the injector as-is when an invitation is reopened.
    """

    id: str
    name: str
    event_title: str | None = None
    host_name: str | None = None
    date_time: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: str | None = None
    owner_id: str | None = None

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Invitation":
        settings = _pick(row, "settings") or {}
        if not isinstance(settings, dict):
            settings = {}
        return cls(
            id=str(_pick(row, "id") or ""),
            name=str(_pick(row, "name") or ""),
            event_title=_pick(row, "eventTitle", "event_title"),
            host_name=_pick(row, "hostName", "host_name"),
            date_time=_pick(row, "dateTime", "date_time"),
            settings=settings,
            created_at=_pick(row, "createdAt", "created_at"),
            owner_id=_pick(row, "ownerId", "owner_id", "user_id"),
        )

    @property
    def field_values(self) -> dict[str, str]:
        raw = self.settings.get("fieldValues")
        if not isinstance(raw, dict):
            return {}
        return {str(key): "" if value is None else str(value) for key, value in raw.items()}
