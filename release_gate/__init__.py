"""release-gate: gated, tagged releases of a single Python package."""
