"""Command-line interface for estateledger."""
