"""Built-in artifact and VCS handlers, discovered at bootstrap."""
