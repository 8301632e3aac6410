"""Core routeopt functionality (routing documents, optimizer, approvals)."""
