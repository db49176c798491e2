"""HTTP routes for corsgate."""
