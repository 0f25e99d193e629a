"""Google Keep Takeout import service."""
