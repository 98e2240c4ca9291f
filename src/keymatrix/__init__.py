"""Switch-matrix annotation engine for keyboard layouts."""
