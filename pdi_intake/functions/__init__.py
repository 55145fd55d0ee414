"""Lambda handlers backing the proposal form."""
