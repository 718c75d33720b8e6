"""Domain helpers: tariffs, course tables and payment events."""
