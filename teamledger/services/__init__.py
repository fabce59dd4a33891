"""Application services: authentication context and user account lifecycle."""
