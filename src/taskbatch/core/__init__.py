"""Core primitives shared by the engine, the API and the CLI: logging, errors, settings, health."""
