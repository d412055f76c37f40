"""StrayWatch Services Layer."""
