"""Revenue-operations analyst agent backend."""
