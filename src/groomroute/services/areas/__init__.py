"""Service area matching and area calendar."""
