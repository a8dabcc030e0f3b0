"""
Utility Functions
=================

This module provides general utility functions used throughout IsoSquares,
including logging configuration and color scheme definitions.

Functions
---------
configure_logging
    Set up logging for the IsoSquares package with customizable
    output format and destinations.
rgb_to_unit
    Convert a 0-255 RGB tuple to the 0-1 range used by matplotlib.

Constants
---------
_TUWIEN_COLOR_SCHEME
    TU Wien corporate color scheme for consistent visualization styling.
"""

import logging
import IsoSquares


def configure_logging(level=logging.INFO, logfile=None):
    """Attach console (and optionally file) handlers to the package logger.

    Runs once on ``import IsoSquares``. Calling it again replaces the
    handlers installed by the previous call, so the level or the log file
    can be changed without duplicating output.

    Args:
        level (int): Level of the ``IsoSquares`` logger.
        logfile (str or os.PathLike, optional): Additional log file.
    """
    logger = logging.getLogger(IsoSquares.__name__)
    logger.setLevel(level)
    for handler in [h for h in logger.handlers if getattr(h, "_isosquares", False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s %(message)s", datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler()]
    if logfile is not None:
        handlers.append(logging.FileHandler(logfile))
    for handler in handlers:
        handler._isosquares = True
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def rgb_to_unit(color):
    return tuple(c / 255 for c in color)


#: TU Wien corporate color scheme
#:
#: Dictionary mapping color names to RGB tuples (0-255 range).
#: Used by the plotting helpers for mesh fills and edges.
_TUWIEN_COLOR_SCHEME = {
    "blue": (0, 102, 153),
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "blue_1": (84, 133, 171),
    "blue_2": (114, 173, 213),
    "blue_3": (166, 213, 236),
    "blue_4": (223, 242, 253),
    "grey": (100, 99, 99),
    "grey_1": (157, 157, 156),
    "grey_2": (208, 208, 208),
    "grey_3": (237, 237, 237),
    "magenta": (186, 70, 130),
}
