"""HTTP layer for the carrier simulator."""
