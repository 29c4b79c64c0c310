"""Background jobs: dramatiq actors and the scheduler."""
