"""AI-facing helpers: chunking, JSON extraction, tool registry, discovery."""
