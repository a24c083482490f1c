"""installer-rewriter: batch rewriting and republishing of installer jars.

Lists every installer version held by a Maven repository or a local
directory tree, applies configured rewrites to each one concurrently and
republishes only the installers that changed, with backups and fresh
checksum sidecars.
"""

__version__ = "1.0.0"
__description__ = "Batch rewriter for published installer artifacts"

from installer_rewriter.core.orchestrator import Rewriter
from installer_rewriter.sources import create_source

__all__ = ["Rewriter", "create_source", "__version__"]
