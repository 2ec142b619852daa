"""
Core Infrastructure.

Configuration, logging, exceptions and concurrency limits shared by the
Jenkins client and the CLI.
"""
