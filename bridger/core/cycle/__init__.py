"""Bridge cycle orchestration and scheduling."""
