"""Spirit Love Play backend: accounts, sessions and password lifecycle."""
