"""Order lifecycle and reporting components."""
