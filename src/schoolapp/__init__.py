"""School administration desktop client.

Layers:
 - ``config``: environment-overridable constants
 - ``core``: persisted state, HTTP transport, error types
 - ``domain``: data types, response normalization, entity registry, validation
 - ``gui``: buses, session controller, view models and PyQt6 widgets
"""

__version__ = "0.1.0"
