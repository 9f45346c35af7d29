"""Custom blocklist management."""
