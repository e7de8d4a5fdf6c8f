"""Operation services: dispatch, progress display, summary rendering."""
