"""Generate application code from Notion page trees."""

__version__ = "1.0.0"
