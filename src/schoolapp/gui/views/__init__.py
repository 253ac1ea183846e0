"""Screens (PyQt6 widgets) for each application phase."""
