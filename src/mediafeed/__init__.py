"""Media library feed synchronization and derived-view engine."""
