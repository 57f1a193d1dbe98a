"""Read-only HTTP API over stored lottery results."""
