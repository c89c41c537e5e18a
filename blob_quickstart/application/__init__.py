"""Application layer - quickstart orchestration."""
