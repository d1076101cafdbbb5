"""Application layer: ports, settings, and the event assembly pipeline."""
