"""
LSC Sign Recognition Package

Real-time Colombian Sign Language (LSC) letter and word recognition from
hand landmarks.
"""

__version__ = "1.0.0"

from . import hand
from . import gesture
from . import inference
from . import utils
