"""HTTP surface of the Chirpline application."""
