"""Interactive location map viewport."""
