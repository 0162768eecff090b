"""SQLite persistence for sessions, messages, results and the catalog."""
