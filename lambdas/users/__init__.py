"""Users module: anonymous identity mapping."""
