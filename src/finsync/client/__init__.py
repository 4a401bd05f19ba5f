"""Client-side remote data access: transport, API, caches and sync engines."""
