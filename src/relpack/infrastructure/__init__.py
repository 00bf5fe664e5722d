"""Infrastructure — templates, overlay materialization, toolchain processes."""
