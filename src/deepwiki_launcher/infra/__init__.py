"""
Infrastructure layer - settings, environment files, logging, and exceptions.

This layer contains the technical concerns shared by the build stages,
the supervisor, and the CLI.
"""
