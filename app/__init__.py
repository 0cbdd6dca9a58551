"""Frame-pair pipeline, I/O, synthetic scenes, and CLI."""
