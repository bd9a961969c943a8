"""JSON-facing helpers shared by the level routes and the CLI."""
