"""Terminal front end for structura."""
