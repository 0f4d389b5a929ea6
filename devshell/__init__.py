"""devshell — reproducible development shell provisioner."""

__version__ = "0.1.0"
