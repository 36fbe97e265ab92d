"""ILS drivers and multi-backend connection."""

from finna.boundary.ils.base import ILSDriver, ILSError
from finna.boundary.ils.connection import ILSConnection
from finna.boundary.ils.demo_driver import DemoDriver

__all__ = ["ILSDriver", "ILSError", "ILSConnection", "DemoDriver"]
