"""
FTNed - FidoNet message reader/editor back end

Message areas stored in a jnode SQL database, with GoldED-compatible
quote detection and reflow for composing replies.
"""

__version__ = "0.1.0"
__author__ = "FTNed Project"
