"""HTTP surface for the host platform."""
