"""
Core business logic modules for the consultancy auto-save service.

Submodules:
- autosave: Debounce primitive, auto-save scheduler and edit sessions
- realtime: Broadcast of save events to connected clients
- ipc: Command dispatch table exposed to the renderer
"""
