"""Engine, session factory and schema bootstrap."""
