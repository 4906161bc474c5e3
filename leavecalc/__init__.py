"""Leave Calc - statutory paid-leave tracking."""

__version__ = "0.3.0"
