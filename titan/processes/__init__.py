"""Process management — detached OS workers and their registry.

titan treats background jobs as forked OS processes. This package provides:
- spawn: fork a detached child, signal it, probe its liveness
- Worker: one tracked child process and its identifier
- WorkerRegistry: the file-backed table of known workers
"""
