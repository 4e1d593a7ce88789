"""Interface layer: HTTP and websocket entry points."""
