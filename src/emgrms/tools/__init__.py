"""Developer tooling (opt-in timing instrumentation)."""
