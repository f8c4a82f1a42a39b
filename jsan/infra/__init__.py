"""
Infrastructure layer for jsan.

External collaborators the shell talks to:
- transport: HTTP access to a JSAN mirror
- installer: The get/install hook used by shell commands
"""

from .transport import Transport
from .installer import Installer, TransportInstaller

__all__ = [
    'Transport',
    'Installer',
    'TransportInstaller',
]
