"""Core infrastructure: paths, configuration, diagnostics and theming."""
