RASTER_EXTENSIONS = {".png", ".jpg", ".jpeg"}
OVERLAY_EXTENSION = ".svg"

DEFAULT_CANVAS_WIDTH = 444
DEFAULT_CANVAS_HEIGHT = 630

# Structural groups that are never offered as editable fields
RESERVED_GROUP_IDS = {"static_text", "layer_1", "layer 1", "background"}

# Overlays author rotated text with small residual angles; below this it is treated as level
ROTATION_THRESHOLD_DEG = 2.0

DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_FONT_SIZE = 12.0

DEFAULT_PUBLIC_PREFIX = "/templates"

SVG_NS = "http://www.w3.org/2000/svg"
