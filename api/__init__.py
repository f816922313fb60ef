"""HTTP driver for the decision engine."""
