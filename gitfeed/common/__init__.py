"""Small helpers shared across gitfeed packages."""
