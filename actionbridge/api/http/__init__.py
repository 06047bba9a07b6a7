"""HTTP request translation helpers."""
