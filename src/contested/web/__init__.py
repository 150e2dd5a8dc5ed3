"""Web layer for Contested."""
