"""Infrastructure: persisted state, HTTP transport and error types."""
