from invitekit.discover import discover_templates
from invitekit.overlay.injector import inject_field_values
from invitekit.overlay.parser import parse_overlay

__all__ = ["discover_templates", "inject_field_values", "parse_overlay"]
