"""HTTP surface: call initiation, tool callbacks and health checks."""
