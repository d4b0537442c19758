"""Use cases: preflight checks, certificates, package index, build stages, server launch."""
