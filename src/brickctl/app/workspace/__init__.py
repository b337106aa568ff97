from .service import Scope, WorkspaceContext

__all__ = ["Scope", "WorkspaceContext"]
