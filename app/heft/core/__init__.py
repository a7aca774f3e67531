"""Core services: configuration, orchestration, diffing and storage."""
