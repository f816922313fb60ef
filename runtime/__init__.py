"""Match driving: line protocol, match loop and event extraction."""
