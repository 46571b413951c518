"""
Configuration constants for the asset catalog.
"""

# --- Catalog Layout ---
# The store file doubles as the marker that a directory is a catalog root.
MARKER_NAME = ".dam"
LOG_NAME = ".dam.log"

# Entries starting with this are never scanned (marker, log, dotfiles)
HIDDEN_PREFIX = "."

# --- Organization ---
# Month labels are fixed so the layout does not depend on the process locale
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
FOLDER_PATTERN = "{year:04d}/{month_abbr}_{day:02d}"

# --- Metadata Parsing ---
DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'EXIF DateTimeDigitized',
    'Image DateTime',
]

# --- Thumbnails ---
THUMBNAIL_SIZE = (600, 400)  # bounding box, aspect ratio is kept
THUMBNAIL_FORMAT = "JPEG"
THUMBNAIL_QUALITY = 85
