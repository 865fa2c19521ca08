"""Client module - HTTP access, mirroring and command line."""
