from .cursor import RemoteSqlCursor, get_exec, make_stub, remote_exec

__all__ = ["RemoteSqlCursor", "get_exec", "make_stub", "remote_exec"]
