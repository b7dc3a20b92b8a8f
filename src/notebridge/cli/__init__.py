"""notebridge command-line interface."""
