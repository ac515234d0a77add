"""Administrative tooling for index maintenance."""

from searchtank.admin.lifecycle import IndexLifecycle

__all__ = ["IndexLifecycle"]
