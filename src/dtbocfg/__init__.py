"""dtbo-config — device-tree overlay configuration via configfs."""

__version__ = "0.5.0"
