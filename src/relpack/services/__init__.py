"""Service layer — operations consumed by the CLI."""
