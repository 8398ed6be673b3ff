"""Task Service: per-user task tracking behind bearer-token authentication."""
