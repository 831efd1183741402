"""Application layer: ports, merge policy, and the watch engine."""
