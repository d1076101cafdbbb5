"""Domain layer: levels, events, ambient context, and the error taxonomy."""
