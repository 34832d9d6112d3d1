"""Constants for capcrop."""

# Source images considered part of a dataset folder
IMAGE_FILE_EXTENSIONS = frozenset({'.jpg', '.jpeg', '.png', '.webp'})

# Output layout, relative to the source folder
OUTPUT_SUBDIR = "output"
DICTIONARY_FILENAME = "image_captions.json"
CAPTION_SUFFIX = ".txt"

# Normalized output size
DEFAULT_OUTPUT_WIDTH = 1024
DEFAULT_OUTPUT_HEIGHT = 1024

# Selection given to dictionary entries written before selections were stored
LEGACY_SELECTION = {"x": 0, "y": 0, "width": 512, "height": 512}

# Opaque white, used for padding and for selections outside the source
BACKGROUND_COLOR = (255, 255, 255, 255)

# Clone naming: <stem>_<n><ext>, first n tried
CLONE_FIRST_INDEX = 2

# Encoder settings for normalized outputs
JPEG_QUALITY = 95
