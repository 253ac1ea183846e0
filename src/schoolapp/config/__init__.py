"""Runtime configuration (environment-overridable constants)."""
