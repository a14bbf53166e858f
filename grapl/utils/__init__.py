"""Support utilities shared by embedding applications."""

from grapl.utils.log import setup_logging

__all__ = ["setup_logging"]
