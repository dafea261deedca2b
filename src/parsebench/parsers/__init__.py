"""CSV parser candidates, fixtures, and output validation."""
