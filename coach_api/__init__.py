"""Thin wrappers over the coaching platform's REST endpoints, one module per area."""
