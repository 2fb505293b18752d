"""Static scene data and optional external data sources."""
