"""Abstract installer rewrite.

A rewrite is one named transformation applied to every installer of a run.
Rewrites are created once at startup, applied in their configured order to
each loaded installer, and closed exactly once after the whole run.

Rewrites **must** be idempotent: when an installer already reflects the
rewrite's target state, ``rewrite()`` must leave ``installer.jar.changed``
as it found it.
"""

from __future__ import annotations

import abc

from installer_rewriter.models.artifacts import Installer


class InstallerRewrite(abc.ABC):
    """Abstract base for all installer rewrites.

    Subclasses **must** implement ``name`` and ``rewrite(installer)``.
    Subclasses holding resources override ``close()``.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable name used in logs."""
        ...

    @abc.abstractmethod
    def rewrite(self, installer: Installer) -> None:
        """Transform *installer* in place."""
        ...

    def close(self) -> None:
        """Release resources held for the run."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
