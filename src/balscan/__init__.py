"""balscan - static code analysis orchestrator for Ballerina projects."""

__version__ = "0.1.0"
