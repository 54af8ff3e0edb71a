"""Support libraries: configuration, hub HTTP client and report rendering."""
