"""Runtime support: configuration, logging and error policy."""
