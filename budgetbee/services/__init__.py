"""
Services Package

- storage: primitive key-value backends
- backup: backup codec and manager
"""
